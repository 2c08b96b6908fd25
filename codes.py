"""
Redemption codes.

Format: ``<PREFIX>-<RANDOM>`` where PREFIX is the first letters of the
restaurant name (e.g. "BUR-7KQ2M9XA"). The random part is drawn with
`secrets` from an alphabet without look-alike characters, so codes can be
read aloud and are not guessable from the time of redemption.
"""

import re
import secrets

from rewardman.conf import rewardman_settings

ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_ATTEMPTS = 5


def code_prefix(restaurant_name: str) -> str:
    letters = re.sub(r"[^A-Za-z0-9]", "", restaurant_name or "").upper()
    length = rewardman_settings.REDEMPTION_CODE_PREFIX_LENGTH
    return letters[:length] or "RWD"


def generate(restaurant_name: str) -> str:
    """Generate a fresh redemption code (uniqueness not checked)."""
    length = rewardman_settings.REDEMPTION_CODE_LENGTH
    body = "".join(secrets.choice(ALPHABET) for _ in range(length))
    return f"{code_prefix(restaurant_name)}-{body}"


def generate_unique(restaurant_name: str) -> str:
    """Generate a code not yet present in the ledger."""
    from rewardman.models import LedgerEntry

    for _ in range(MAX_ATTEMPTS):
        code = generate(restaurant_name)
        if not LedgerEntry.objects.filter(redemption_code=code).exists():
            return code
    # The unique constraint on LedgerEntry.redemption_code is the last guard.
    return generate(restaurant_name)


def normalize(code: str) -> str:
    """Canonical form for lookups typed by staff."""
    return (code or "").strip().upper()

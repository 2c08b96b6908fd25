"""
Rewardman configuration.

Usage in settings.py:
    REWARDMAN = {
        "TIER_THRESHOLDS": {"bronze": 0, "silver": 500, "gold": 2000},
        "SIGNUP_BONUS_POINTS": 100,
    }
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings


def _default_thresholds() -> dict[str, int]:
    return {"bronze": 0, "silver": 500, "gold": 2000, "platinum": 5000}


@dataclass
class RewardmanSettings:
    """Rewardman configuration settings."""

    # Tier -> minimum lifetime points. Strictly increasing, lowest must be 0.
    TIER_THRESHOLDS: dict[str, int] = field(default_factory=_default_thresholds)

    # Points granted on enrollment (0 disables the signup entry)
    SIGNUP_BONUS_POINTS: int = 50

    # Purchase accrual: points per currency unit spent
    POINTS_PER_CURRENCY_UNIT: Decimal = Decimal("1")

    # Display value of one point in currency
    POINT_VALUE: Decimal = Decimal("0.05")

    # Redemption code: random part length and restaurant prefix length
    REDEMPTION_CODE_LENGTH: int = 8
    REDEMPTION_CODE_PREFIX_LENGTH: int = 3

    # Redemption session
    STAFF_CONFIRM_DISPLAY_SECONDS: int = 3
    REDEMPTION_CONFLICT_RETRIES: int = 1


def get_rewardman_settings() -> RewardmanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "REWARDMAN", {})
    return RewardmanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_rewardman_settings(), name)


rewardman_settings = _LazySettings()

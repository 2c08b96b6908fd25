"""
Tier policy - pure mapping of lifetime points to tier standing.

No database access. Thresholds come from REWARDMAN["TIER_THRESHOLDS"]
unless a policy is built explicitly:

    policy = TierPolicy({"bronze": 0, "silver": 100, "gold": 500})
    policy.classify(100)   # TierStanding(tier="silver", progress=0)
"""

from dataclasses import dataclass

from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.utils.translation import gettext_lazy as _


class Tier(models.TextChoices):
    """Membership tiers, declared lowest first."""

    BRONZE = "bronze", _("Bronze")
    SILVER = "silver", _("Silver")
    GOLD = "gold", _("Gold")
    PLATINUM = "platinum", _("Platinum")


_TIER_ORDER = [choice.value for choice in Tier]


def tier_rank(tier: str) -> int:
    """Ordinal of a tier (bronze=0). Raises ValueError for unknown tiers."""
    try:
        return _TIER_ORDER.index(str(tier))
    except ValueError:
        raise ValueError(f"Unknown tier: {tier!r}") from None


def meets_tier(tier: str, min_tier: str) -> bool:
    """True if `tier` is at or above `min_tier`."""
    return tier_rank(tier) >= tier_rank(min_tier)


@dataclass(frozen=True)
class TierStanding:
    """Result of classifying a lifetime points total."""

    tier: str
    progress: int
    next_tier: str | None = None
    points_to_next: int = 0


class TierPolicy:
    """Ordered tier thresholds with classification."""

    def __init__(self, thresholds: dict[str, int]):
        self.thresholds = self._validate(thresholds)

    @staticmethod
    def _validate(thresholds: dict[str, int]) -> list[tuple[str, int]]:
        if not thresholds:
            raise ImproperlyConfigured("TIER_THRESHOLDS must define at least one tier")

        try:
            ordered = sorted(
                ((str(tier), int(points)) for tier, points in thresholds.items()),
                key=lambda item: tier_rank(item[0]),
            )
        except ValueError as e:
            raise ImproperlyConfigured(f"Invalid TIER_THRESHOLDS: {e}") from e

        if ordered[0][1] != 0:
            raise ImproperlyConfigured(
                f"Lowest tier '{ordered[0][0]}' must start at 0 points"
            )
        for (prev_tier, prev_points), (tier, points) in zip(ordered, ordered[1:]):
            if points <= prev_points:
                raise ImproperlyConfigured(
                    f"Tier thresholds must be strictly increasing: "
                    f"{prev_tier}={prev_points}, {tier}={points}"
                )
        return ordered

    @property
    def tiers(self) -> list[str]:
        return [tier for tier, _ in self.thresholds]

    @property
    def top_tier(self) -> str:
        return self.thresholds[-1][0]

    def threshold(self, tier: str) -> int | None:
        return dict(self.thresholds).get(str(tier))

    def classify(self, lifetime_points: int) -> TierStanding:
        """Map lifetime points to the highest reached tier and progress (0-100)."""
        if lifetime_points < 0:
            raise ValueError("lifetime_points must be non-negative")

        index = 0
        for i, (_, points) in enumerate(self.thresholds):
            if points <= lifetime_points:
                index = i

        tier, current = self.thresholds[index]
        if index == len(self.thresholds) - 1:
            return TierStanding(tier=tier, progress=0)

        next_tier, upcoming = self.thresholds[index + 1]
        progress = (100 * (lifetime_points - current)) // (upcoming - current)
        return TierStanding(
            tier=tier,
            progress=max(0, min(100, progress)),
            next_tier=next_tier,
            points_to_next=upcoming - lifetime_points,
        )


def get_policy() -> TierPolicy:
    """Build the policy from current settings."""
    from rewardman.conf import rewardman_settings

    return TierPolicy(rewardman_settings.TIER_THRESHOLDS)


def classify(lifetime_points: int) -> TierStanding:
    """Classify using the configured thresholds."""
    return get_policy().classify(lifetime_points)

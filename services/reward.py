"""Reward catalog service."""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError

from rewardman import codes
from rewardman.exceptions import NotFoundError, ValidationError
from rewardman.models import EntryType, LedgerEntry, Reward, RewardCategory
from rewardman.services import ledger
from rewardman.services.customer import get_restaurant
from rewardman.tiers import Tier, get_policy, tier_rank

logger = logging.getLogger(__name__)


def rewards(restaurant_id, only_active: bool = True) -> list[Reward]:
    """List a restaurant's rewards."""
    qs = Reward.objects.filter(restaurant_id=restaurant_id)
    if only_active:
        qs = qs.filter(is_active=True)
    return list(qs)


def available_rewards(restaurant_id, customer_id) -> list[Reward]:
    """
    Active rewards the customer's tier unlocks.

    Affordability is not filtered: the wallet shows locked-by-balance
    rewards too. Raises NotFoundError for unknown customers.
    """
    customer = ledger.get_customer(customer_id, restaurant_id=restaurant_id)
    rank = tier_rank(get_policy().classify(customer.lifetime_points).tier)
    return [
        reward
        for reward in rewards(restaurant_id)
        if tier_rank(reward.min_tier) <= rank
    ]


def get(reward_id) -> Reward | None:
    try:
        return Reward.objects.get(pk=reward_id)
    except (Reward.DoesNotExist, DjangoValidationError, ValueError):
        return None


def publish(
    restaurant_id,
    name: str,
    points_required: int,
    description: str = "",
    category: str = RewardCategory.OTHER,
    min_tier: str = Tier.BRONZE,
) -> Reward:
    """Publish a new reward. Published rewards are only ever toggled."""
    if isinstance(points_required, bool) or not isinstance(points_required, int) or points_required <= 0:
        raise ValidationError(
            "INVALID_POINTS",
            message="points_required must be a positive integer",
            points_required=points_required,
        )
    if min_tier not in Tier.values:
        raise ValidationError("VALIDATION_ERROR", message="Unknown tier", min_tier=min_tier)
    if category not in RewardCategory.values:
        raise ValidationError("VALIDATION_ERROR", message="Unknown category", category=category)

    restaurant = get_restaurant(restaurant_id)
    reward = Reward.objects.create(
        restaurant=restaurant,
        name=name,
        description=description,
        points_required=points_required,
        category=category,
        min_tier=min_tier,
    )
    logger.info("Reward %s published at %s", reward.pk, restaurant.slug)
    return reward


def set_availability(reward_id, is_active: bool) -> Reward:
    """Toggle reward availability (the only mutation after publishing)."""
    reward = get(reward_id)
    if reward is None:
        raise NotFoundError("REWARD_NOT_FOUND", reward_id=str(reward_id))
    if reward.is_active != is_active:
        reward.is_active = is_active
        reward.save(update_fields=["is_active", "updated_at"])
    return reward


def find_redemption(restaurant_id, redemption_code: str) -> LedgerEntry | None:
    """Look up a redemption by the code the customer shows to staff."""
    code = codes.normalize(redemption_code)
    if not code:
        return None
    return (
        LedgerEntry.objects.select_related("customer", "reward")
        .filter(
            entry_type=EntryType.REDEMPTION,
            redemption_code=code,
            customer__restaurant_id=restaurant_id,
        )
        .first()
    )

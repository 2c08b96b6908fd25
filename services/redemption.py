"""Redemption engine - exchange points for a reward, at most once.

Preconditions are checked in a fixed order, each with its own error:

    1. Reward exists and is active        -> NotFoundError
    2. Customer tier >= reward.min_tier   -> IneligibleTierError
    3. total_points >= points_required    -> InsufficientPointsError

The customer row is locked and re-read inside transaction.atomic() before
checks 2 and 3, and the deduction goes through the ledger's version
compare-and-swap. Balances supplied by clients are never trusted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from rewardman import codes
from rewardman.exceptions import (
    ConcurrencyConflictError,
    IneligibleTierError,
    InsufficientPointsError,
    NotFoundError,
)
from rewardman.models import Customer, EntryType, Reward
from rewardman.services import ledger
from rewardman.signals import reward_redeemed
from rewardman.tiers import get_policy, meets_tier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionReceipt:
    """Outcome of a successful redemption."""

    redemption_code: str
    customer_id: str
    reward_id: str
    reward_name: str
    points_spent: int
    balance_after: int
    entry_id: str
    redeemed_at: datetime


class RedemptionEngine:
    """
    Settles reward redemptions against the points ledger.

    Uses @classmethod for extensibility (consistent with other services).
    The engine does not retry; ConcurrencyConflictError propagates to the
    caller.
    """

    @classmethod
    def redeem(
        cls,
        customer_id,
        reward_id,
        restaurant_id=None,
        created_by: str = "",
    ) -> RedemptionReceipt:
        """
        Redeem a reward for a customer.

        Args:
            customer_id: Customer id
            reward_id: Reward id
            restaurant_id: Restaurant scope (optional)
            created_by: Who triggered the redemption

        Returns:
            RedemptionReceipt with the new redemption code and balance

        Raises:
            NotFoundError: Reward or customer missing/inactive
            IneligibleTierError: Customer tier below reward.min_tier
            InsufficientPointsError: Balance below points_required
            ConcurrencyConflictError: Lost the race on the customer row or on
                the redemption code
        """
        reward = cls._get_active_reward(reward_id, restaurant_id)

        code = ""
        try:
            with transaction.atomic():
                customer = ledger.get_customer(
                    customer_id,
                    restaurant_id=reward.restaurant_id,
                    for_update=True,
                )
                cls._check_tier(customer, reward)
                cls._check_balance(customer, reward)

                code = codes.generate_unique(reward.restaurant.name)
                entry = ledger.append(
                    customer,
                    EntryType.REDEMPTION,
                    -reward.points_required,
                    reward=reward,
                    redemption_code=code,
                    description=f"Resgate: {reward.name}",
                    created_by=created_by,
                )
        except IntegrityError:
            # Redemption code collided after the uniqueness check; nothing was written.
            logger.warning("Redemption code collision for customer %s (code %s)", customer_id, code)
            raise ConcurrencyConflictError(customer_id=str(customer_id), redemption_code=code)

        receipt = RedemptionReceipt(
            redemption_code=entry.redemption_code,
            customer_id=str(customer.pk),
            reward_id=str(reward.pk),
            reward_name=reward.name,
            points_spent=reward.points_required,
            balance_after=entry.balance_after,
            entry_id=str(entry.pk),
            redeemed_at=entry.created_at,
        )
        logger.info(
            "Reward %s redeemed by customer %s (code %s, balance %d)",
            reward.pk,
            customer.pk,
            receipt.redemption_code,
            receipt.balance_after,
        )
        reward_redeemed.send(
            sender=type(entry), customer=customer, entry=entry, receipt=receipt
        )
        return receipt

    @classmethod
    def _get_active_reward(cls, reward_id, restaurant_id=None) -> Reward:
        filters = {"pk": reward_id, "is_active": True}
        if restaurant_id is not None:
            filters["restaurant_id"] = restaurant_id
        try:
            return Reward.objects.select_related("restaurant").get(**filters)
        except (Reward.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError("REWARD_NOT_FOUND", reward_id=str(reward_id))

    @classmethod
    def _check_tier(cls, customer: Customer, reward: Reward) -> None:
        # Tier is derived from canonical lifetime points, not the cached field.
        tier = get_policy().classify(customer.lifetime_points).tier
        if not meets_tier(tier, reward.min_tier):
            logger.warning(
                "Redemption rejected (tier) customer=%s tier=%s reward=%s min_tier=%s",
                customer.pk,
                tier,
                reward.pk,
                reward.min_tier,
            )
            raise IneligibleTierError(
                tier=tier,
                min_tier=reward.min_tier,
                reward_id=str(reward.pk),
            )

    @classmethod
    def _check_balance(cls, customer: Customer, reward: Reward) -> None:
        if customer.total_points < reward.points_required:
            logger.warning(
                "Redemption rejected (balance) customer=%s available=%d required=%d",
                customer.pk,
                customer.total_points,
                reward.points_required,
            )
            raise InsufficientPointsError(
                available=customer.total_points,
                requested=reward.points_required,
                reward_id=str(reward.pk),
            )

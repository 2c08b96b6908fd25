"""Rewardman models."""

from rewardman.tiers import Tier
from rewardman.models.restaurant import Restaurant
from rewardman.models.customer import Customer
from rewardman.models.reward import Reward, RewardCategory
from rewardman.models.ledger import LedgerEntry, EntryType, ACCRUAL_TYPES

__all__ = [
    "Tier",
    "Restaurant",
    "Customer",
    "Reward",
    "RewardCategory",
    # Points ledger (source of truth)
    "LedgerEntry",
    "EntryType",
    "ACCRUAL_TYPES",
]

"""Rewardman services.

- ledger: append-only points ledger and the cached customer aggregate
- redemption: RedemptionEngine (reward redemption, at most once)
- customer: enrollment, lookups, history
- reward: reward catalog and staff-side redemption lookup
- stats: dashboard aggregates
"""

from rewardman.services import ledger
from rewardman.services import customer
from rewardman.services import reward
from rewardman.services import redemption
from rewardman.services import stats

__all__ = ["ledger", "customer", "reward", "redemption", "stats"]

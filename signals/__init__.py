"""
Rewardman signals - public event API.

Emitted signals:
- customer_enrolled: Emitted by services.customer.create()
- points_accrued: Emitted by services.ledger after an accrual entry
- reward_redeemed: Emitted by services.redemption after a redemption
- tier_changed: Emitted by services.ledger when an accrual moves the tier
"""

from django.dispatch import Signal

customer_enrolled = Signal()  # sender=Customer, customer=Customer
points_accrued = Signal()  # sender=LedgerEntry, customer=Customer, entry=LedgerEntry
reward_redeemed = Signal()  # sender=LedgerEntry, customer=Customer, entry=LedgerEntry, receipt=RedemptionReceipt
tier_changed = Signal()  # sender=Customer, customer=Customer, old_tier=str, new_tier=str

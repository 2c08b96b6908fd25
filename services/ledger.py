"""Points ledger - append-only entries plus the cached customer aggregate.

The ledger is the source of truth. Customer.total_points, lifetime_points,
current_tier and tier_progress are rewritten here, in the same
transaction.atomic() block as the entry insert, through a compare-and-swap
on Customer.version. A lost race raises ConcurrencyConflictError and
nothing is written.
"""

import logging
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import (
    ConcurrencyConflictError,
    InsufficientPointsError,
    NotFoundError,
    ValidationError,
)
from rewardman.models import ACCRUAL_TYPES, Customer, EntryType, LedgerEntry
from rewardman.signals import points_accrued, tier_changed
from rewardman.tiers import get_policy

logger = logging.getLogger(__name__)


def get_customer(customer_id, restaurant_id=None, for_update: bool = False) -> Customer:
    """
    Read the canonical customer row or raise NotFoundError.

    With for_update=True the row is locked; MUST be called inside
    transaction.atomic().
    """
    qs = Customer.objects.all()
    if for_update:
        qs = qs.select_for_update()

    filters = {"pk": customer_id, "is_active": True}
    if restaurant_id is not None:
        filters["restaurant_id"] = restaurant_id

    try:
        return qs.get(**filters)
    except (Customer.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("CUSTOMER_NOT_FOUND", customer_id=str(customer_id))


def validate_entry(entry_type: str, points, reward=None) -> None:
    """Reject malformed entries before anything touches the database."""
    if entry_type not in EntryType.values:
        raise ValidationError("INVALID_ENTRY_TYPE", entry_type=entry_type)

    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError("INVALID_POINTS", message="Points must be an integer", points=points)

    if entry_type == EntryType.REDEMPTION:
        if points >= 0:
            raise ValidationError(
                "INVALID_POINTS",
                message="Redemption points must be negative",
                points=points,
            )
        if reward is None:
            raise ValidationError("REWARD_REQUIRED")
        return

    if points == 0:
        raise ValidationError("INVALID_POINTS", message="Accrual points cannot be zero", points=0)
    if points < 0:
        raise ValidationError(
            "INVALID_POINTS",
            message="Accrual points must be positive",
            points=points,
        )
    if reward is not None:
        raise ValidationError("REWARD_NOT_ALLOWED", entry_type=entry_type)


def append(
    customer,
    entry_type: str,
    points: int,
    *,
    amount_spent: Decimal | None = None,
    reward=None,
    redemption_code: str = "",
    description: str = "",
    reference: str = "",
    created_by: str = "",
    count_visit: bool = False,
) -> LedgerEntry:
    """
    Append an immutable entry and update the customer aggregate.

    Args:
        customer: Customer instance (its version is the CAS token) or id
        entry_type: One of EntryType
        points: Signed delta (positive accrual, negative redemption)
        amount_spent: Purchase amount, added to total_spent when count_visit
        reward: Reward (redemption entries only)
        redemption_code: Staff-facing code (redemption entries only)
        description: Human-readable reason
        reference: External id; replaying the same reference returns the
            existing entry
        created_by: Who triggered the entry
        count_visit: Increment visit_count and total_spent

    Returns:
        Created (or replayed) LedgerEntry

    Raises:
        ValidationError: Malformed entry
        InsufficientPointsError: Delta would make total_points negative
        ConcurrencyConflictError: Customer changed since it was read
        NotFoundError: Customer missing or inactive
    """
    validate_entry(entry_type, points, reward)
    if not isinstance(customer, Customer):
        customer = get_customer(customer)

    if reference:
        existing = LedgerEntry.objects.filter(
            customer_id=customer.pk, entry_type=entry_type, reference=reference
        ).first()
        if existing:
            logger.info("Ledger replay ignored: %s %s %s", customer.pk, entry_type, reference)
            return existing

    old_tier = customer.current_tier
    new_balance = customer.total_points + points
    if new_balance < 0:
        raise InsufficientPointsError(
            available=customer.total_points,
            requested=-points,
        )

    values = {
        "total_points": new_balance,
        "version": customer.version + 1,
        "updated_at": timezone.now(),
    }
    if points > 0:
        lifetime = customer.lifetime_points + points
        standing = get_policy().classify(lifetime)
        values.update(
            lifetime_points=lifetime,
            current_tier=standing.tier,
            tier_progress=standing.progress,
        )
    if count_visit:
        values.update(
            visit_count=customer.visit_count + 1,
            total_spent=customer.total_spent + (amount_spent or Decimal("0")),
        )

    with transaction.atomic():
        updated = Customer.objects.filter(
            pk=customer.pk,
            version=customer.version,
            is_active=True,
        ).update(**values)
        if updated != 1:
            logger.warning(
                "Ledger conflict for customer %s at version %s", customer.pk, customer.version
            )
            raise ConcurrencyConflictError(
                customer_id=str(customer.pk),
                version=customer.version,
            )

        entry = LedgerEntry.objects.create(
            customer=customer,
            entry_type=entry_type,
            points=points,
            balance_after=new_balance,
            amount_spent=amount_spent,
            reward=reward,
            redemption_code=redemption_code,
            description=description,
            reference=reference,
            created_by=created_by,
        )

    for field, value in values.items():
        setattr(customer, field, value)

    logger.info(
        "Ledger %s %+d for customer %s (balance %d)",
        entry_type,
        points,
        customer.pk,
        new_balance,
    )

    if entry.is_accrual:
        points_accrued.send(sender=LedgerEntry, customer=customer, entry=entry)
        if customer.current_tier != old_tier:
            tier_changed.send(
                sender=Customer,
                customer=customer,
                old_tier=old_tier,
                new_tier=customer.current_tier,
            )

    return entry


def award(
    customer_id,
    entry_type: str,
    points: int,
    description: str = "",
    reference: str = "",
    created_by: str = "",
) -> LedgerEntry:
    """Grant bonus, referral or signup points."""
    if entry_type not in ACCRUAL_TYPES or entry_type == EntryType.PURCHASE:
        raise ValidationError("INVALID_ENTRY_TYPE", entry_type=entry_type)
    return append(
        customer_id,
        entry_type,
        points,
        description=description,
        reference=reference,
        created_by=created_by,
    )


def points_for_amount(amount_spent: Decimal) -> int:
    """Points earned for a purchase amount (rounded down)."""
    rate = Decimal(str(rewardman_settings.POINTS_PER_CURRENCY_UNIT))
    return int((amount_spent * rate).to_integral_value(rounding=ROUND_FLOOR))


def record_purchase(
    customer_id,
    amount_spent,
    points: int | None = None,
    reference: str = "",
    description: str = "",
    created_by: str = "",
) -> LedgerEntry:
    """
    Accrue points for a visit/purchase.

    Points default to POINTS_PER_CURRENCY_UNIT per unit spent. Also bumps
    visit_count and total_spent. Idempotent per reference.
    """
    try:
        amount = Decimal(str(amount_spent))
    except InvalidOperation:
        raise ValidationError("VALIDATION_ERROR", message="Invalid amount", amount=str(amount_spent))
    if not amount.is_finite():
        raise ValidationError("VALIDATION_ERROR", message="Invalid amount", amount=str(amount_spent))
    if amount < 0:
        raise ValidationError("VALIDATION_ERROR", message="Amount cannot be negative", amount=str(amount))

    if points is None:
        points = points_for_amount(amount)

    return append(
        customer_id,
        EntryType.PURCHASE,
        points,
        amount_spent=amount,
        description=description,
        reference=reference,
        created_by=created_by,
        count_visit=True,
    )


def current_balance(customer_id) -> int:
    """Spendable balance: sum of all entry deltas."""
    return LedgerEntry.objects.filter(customer_id=customer_id).aggregate(
        total=Coalesce(Sum("points"), 0)
    )["total"]


def lifetime_balance(customer_id) -> int:
    """Lifetime total: sum of positive deltas only."""
    return LedgerEntry.objects.filter(customer_id=customer_id, points__gt=0).aggregate(
        total=Coalesce(Sum("points"), 0)
    )["total"]


def entries(customer_id, limit: int | None = None) -> list[LedgerEntry]:
    """Ledger history, newest first."""
    qs = LedgerEntry.objects.filter(customer_id=customer_id).select_related("reward")
    qs = qs.order_by("-created_at", "-id")
    if limit:
        qs = qs[:limit]
    return list(qs)


def rebuild_aggregates(customer_id) -> bool:
    """
    Recompute the cached aggregate from the ledger.

    Returns True if the cache had drifted and was rewritten.
    """
    with transaction.atomic():
        customer = get_customer(customer_id, for_update=True)
        total = current_balance(customer.pk)
        lifetime = lifetime_balance(customer.pk)
        standing = get_policy().classify(lifetime)

        expected = {
            "total_points": total,
            "lifetime_points": lifetime,
            "current_tier": standing.tier,
            "tier_progress": standing.progress,
        }
        drifted = {
            field: value
            for field, value in expected.items()
            if getattr(customer, field) != value
        }
        if not drifted:
            return False

        logger.warning("Rebuilding aggregate for customer %s: %s", customer.pk, drifted)
        Customer.objects.filter(pk=customer.pk).update(
            version=customer.version + 1,
            updated_at=timezone.now(),
            **expected,
        )
    return True

"""Program statistics for the restaurant and super-admin dashboards."""

from dataclasses import dataclass
from decimal import Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from rewardman.models import Customer, LedgerEntry, Restaurant, Reward


@dataclass(frozen=True)
class ProgramStats:
    """Aggregates derived from customers, rewards and the ledger."""

    total_customers: int
    total_rewards: int
    total_revenue: Decimal
    total_points_issued: int
    total_points_redeemed: int
    total_restaurants: int = 1


def _stats(customers, rewards, entries, total_restaurants: int = 1) -> ProgramStats:
    revenue = customers.aggregate(
        total=Coalesce(Sum("total_spent"), Value(Decimal("0")), output_field=DecimalField())
    )["total"]
    issued = entries.filter(points__gt=0).aggregate(total=Coalesce(Sum("points"), 0))["total"]
    redeemed = entries.filter(points__lt=0).aggregate(total=Coalesce(Sum("points"), 0))["total"]

    return ProgramStats(
        total_customers=customers.count(),
        total_rewards=rewards.count(),
        total_revenue=revenue,
        total_points_issued=issued,
        total_points_redeemed=-redeemed,
        total_restaurants=total_restaurants,
    )


def restaurant_stats(restaurant_id) -> ProgramStats:
    """Stats for one restaurant (active customers, active rewards)."""
    return _stats(
        Customer.objects.filter(restaurant_id=restaurant_id, is_active=True),
        Reward.objects.filter(restaurant_id=restaurant_id, is_active=True),
        LedgerEntry.objects.filter(customer__restaurant_id=restaurant_id),
    )


def system_stats() -> ProgramStats:
    """Stats across all active restaurants."""
    return _stats(
        Customer.objects.filter(is_active=True, restaurant__is_active=True),
        Reward.objects.filter(is_active=True, restaurant__is_active=True),
        LedgerEntry.objects.filter(customer__restaurant__is_active=True),
        total_restaurants=Restaurant.objects.filter(is_active=True).count(),
    )

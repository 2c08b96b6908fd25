"""Customer service - enrollment, lookups and history.

All write operations that touch >1 record use transaction.atomic().
"""

import logging
from datetime import date

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q

from rewardman.conf import rewardman_settings
from rewardman.exceptions import NotFoundError, ValidationError
from rewardman.models import Customer, EntryType, LedgerEntry, Restaurant
from rewardman.services import ledger
from rewardman.signals import customer_enrolled
from rewardman.tiers import get_policy

logger = logging.getLogger(__name__)


def get_restaurant(restaurant_id) -> Restaurant:
    """Get active restaurant or raise NotFoundError."""
    try:
        return Restaurant.objects.get(pk=restaurant_id, is_active=True)
    except (Restaurant.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError("RESTAURANT_NOT_FOUND", restaurant_id=str(restaurant_id))


def get(restaurant_id, customer_id) -> Customer | None:
    """Get customer by id within a restaurant."""
    try:
        return ledger.get_customer(customer_id, restaurant_id=restaurant_id)
    except NotFoundError:
        return None


def get_by_email(restaurant_id, email: str) -> Customer | None:
    """Get customer by email (case-insensitive)."""
    if not email:
        return None
    try:
        return Customer.objects.get(
            restaurant_id=restaurant_id,
            email__iexact=email.strip(),
            is_active=True,
        )
    except (Customer.DoesNotExist, DjangoValidationError, ValueError):
        return None


def transactions(restaurant_id, customer_id, limit: int | None = None) -> list[LedgerEntry]:
    """Ledger history, newest first. Empty list for unknown customers.

    limit=None returns the whole history.
    """
    cust = get(restaurant_id, customer_id)
    if not cust:
        return []
    return ledger.entries(cust.pk, limit=limit)


def search(restaurant_id, query: str = "", limit: int = 20) -> list[Customer]:
    """Search customers by name, email or phone."""
    qs = Customer.objects.filter(restaurant_id=restaurant_id, is_active=True)

    if query:
        qs = qs.filter(
            Q(first_name__icontains=query)
            | Q(last_name__icontains=query)
            | Q(email__icontains=query)
            | Q(phone__icontains=query)
        )

    return list(qs[:limit])


def create(
    restaurant_id,
    first_name: str,
    last_name: str,
    email: str,
    phone: str = "",
    date_of_birth: date | None = None,
) -> Customer:
    """
    Enroll a new customer.

    Appends a signup entry of SIGNUP_BONUS_POINTS (when > 0) in the same
    transaction.

    Raises:
        ValidationError: Missing name, invalid or duplicate email
        NotFoundError: Restaurant missing or inactive
    """
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    email = (email or "").strip().lower()

    if not first_name or not last_name:
        raise ValidationError("VALIDATION_ERROR", message="First and last name are required")
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("INVALID_EMAIL", email=email)

    restaurant = get_restaurant(restaurant_id)
    if Customer.objects.filter(restaurant=restaurant, email=email).exists():
        raise ValidationError("DUPLICATE_EMAIL", email=email)

    standing = get_policy().classify(0)
    bonus = rewardman_settings.SIGNUP_BONUS_POINTS

    with transaction.atomic():
        cust = Customer.objects.create(
            restaurant=restaurant,
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone="".join(filter(str.isdigit, phone or "")),
            date_of_birth=date_of_birth,
            current_tier=standing.tier,
            tier_progress=standing.progress,
        )
        if bonus > 0:
            ledger.append(
                cust,
                EntryType.SIGNUP,
                bonus,
                description="Bônus de cadastro",
                reference=f"signup:{cust.pk}",
            )

    logger.info("Customer %s enrolled at %s", cust.pk, restaurant.slug)
    customer_enrolled.send(sender=Customer, customer=cust)
    return cust

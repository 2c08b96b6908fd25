"""Pytest fixtures for Rewardman tests."""

import pytest

from rewardman.models import Customer, EntryType, Restaurant, Reward
from rewardman.services import ledger


@pytest.fixture
def restaurant(db):
    """Create a test restaurant."""
    return Restaurant.objects.create(name="Burger Palace", slug="burger-palace")


@pytest.fixture
def other_restaurant(db):
    return Restaurant.objects.create(name="Taco Town", slug="taco-town")


@pytest.fixture
def customer(restaurant):
    """Create a customer with an empty ledger."""
    return Customer.objects.create(
        restaurant=restaurant,
        first_name="John",
        last_name="Doe",
        email="john@example.com",
    )


@pytest.fixture
def customer_b(restaurant):
    return Customer.objects.create(
        restaurant=restaurant,
        first_name="Jane",
        last_name="Roe",
        email="jane@example.com",
    )


@pytest.fixture
def small_tiers(settings):
    """Thresholds bronze=0, silver=100, gold=500."""
    settings.REWARDMAN = {
        "TIER_THRESHOLDS": {"bronze": 0, "silver": 100, "gold": 500},
        "SIGNUP_BONUS_POINTS": 50,
    }
    return settings.REWARDMAN


@pytest.fixture
def fund():
    """Grant bonus points to a customer and return the refreshed customer."""

    def _fund(customer, points):
        ledger.award(customer.pk, EntryType.BONUS, points, "Test bonus")
        customer.refresh_from_db()
        return customer

    return _fund


@pytest.fixture
def reward(restaurant):
    """75-point bronze reward."""
    return Reward.objects.create(
        restaurant=restaurant,
        name="Free Fries",
        points_required=75,
        category="food",
        min_tier="bronze",
    )


@pytest.fixture
def reward_expensive(restaurant):
    """150-point bronze reward."""
    return Reward.objects.create(
        restaurant=restaurant,
        name="Combo Meal",
        points_required=150,
        category="food",
        min_tier="bronze",
    )


@pytest.fixture
def reward_gold(restaurant):
    """Cheap reward locked to gold members."""
    return Reward.objects.create(
        restaurant=restaurant,
        name="Chef's Table",
        points_required=10,
        category="experience",
        min_tier="gold",
    )

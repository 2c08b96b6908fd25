"""Tests for Rewardman public services."""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from rewardman.exceptions import NotFoundError, RewardmanError, ValidationError
from rewardman.models import Customer, EntryType, Reward
from rewardman.protocols import CustomerPointerStore, InMemoryPointerStore
from rewardman.service import CustomerService, RewardService
from rewardman.services import stats
from rewardman.signals import customer_enrolled


pytestmark = pytest.mark.django_db


class TestCustomerService:
    """Enrollment and lookups."""

    def test_create_customer_grants_signup_bonus(self, restaurant):
        cust = CustomerService.create_customer(
            restaurant.pk, "Ana", "Lima", "  Ana@Example.com ", phone="(11) 99999-0000"
        )

        assert cust.email == "ana@example.com"
        assert cust.phone == "11999990000"
        assert cust.total_points == 50
        assert cust.lifetime_points == 50
        assert cust.current_tier == "bronze"

        entries = CustomerService.get_customer_transactions(restaurant.pk, cust.pk)
        assert [e.entry_type for e in entries] == [EntryType.SIGNUP]

    def test_signup_bonus_disabled(self, restaurant, settings):
        settings.REWARDMAN = {"SIGNUP_BONUS_POINTS": 0}
        cust = CustomerService.create_customer(restaurant.pk, "Ana", "Lima", "ana@example.com")
        assert cust.total_points == 0
        assert CustomerService.get_customer_transactions(restaurant.pk, cust.pk) == []

    def test_create_sends_signal(self, restaurant):
        received = []

        def handler(sender, customer, **kwargs):
            received.append(customer.email)

        customer_enrolled.connect(handler)
        try:
            CustomerService.create_customer(restaurant.pk, "Ana", "Lima", "ana@example.com")
        finally:
            customer_enrolled.disconnect(handler)

        assert received == ["ana@example.com"]

    def test_duplicate_email_rejected(self, restaurant, customer):
        with pytest.raises(ValidationError, match="DUPLICATE_EMAIL"):
            CustomerService.create_customer(restaurant.pk, "John", "Again", "JOHN@example.com")

    def test_same_email_other_restaurant_allowed(self, other_restaurant, customer):
        cust = CustomerService.create_customer(other_restaurant.pk, "John", "Doe", "john@example.com")
        assert cust.restaurant == other_restaurant

    def test_invalid_email_rejected(self, restaurant):
        with pytest.raises(ValidationError, match="INVALID_EMAIL"):
            CustomerService.create_customer(restaurant.pk, "Ana", "Lima", "not-an-email")

    def test_names_required(self, restaurant):
        with pytest.raises(ValidationError):
            CustomerService.create_customer(restaurant.pk, " ", "Lima", "ana@example.com")

    def test_unknown_restaurant(self, db):
        with pytest.raises(NotFoundError, match="RESTAURANT_NOT_FOUND"):
            CustomerService.create_customer(
                "00000000-0000-0000-0000-000000000000", "Ana", "Lima", "ana@example.com"
            )

    def test_get_customer(self, restaurant, customer):
        assert CustomerService.get_customer(restaurant.pk, customer.pk) == customer

    def test_get_customer_wrong_restaurant(self, other_restaurant, customer):
        assert CustomerService.get_customer(other_restaurant.pk, customer.pk) is None

    def test_get_customer_by_email(self, restaurant, customer):
        assert CustomerService.get_customer_by_email(restaurant.pk, "JOHN@example.com") == customer
        assert CustomerService.get_customer_by_email(restaurant.pk, "nobody@example.com") is None

    def test_transactions_newest_first(self, restaurant, customer):
        CustomerService.award_bonus(restaurant.pk, customer.pk, 10, "first")
        CustomerService.award_referral(restaurant.pk, customer.pk, 20, "second")

        entries = CustomerService.get_customer_transactions(restaurant.pk, customer.pk)
        assert [e.description for e in entries] == ["second", "first"]

    def test_transactions_default_returns_whole_history(self, restaurant, customer):
        for i in range(55):
            CustomerService.award_bonus(restaurant.pk, customer.pk, 1, f"bonus {i}")

        assert len(CustomerService.get_customer_transactions(restaurant.pk, customer.pk)) == 55
        limited = CustomerService.get_customer_transactions(restaurant.pk, customer.pk, limit=10)
        assert len(limited) == 10

    def test_transactions_unknown_customer(self, restaurant):
        assert CustomerService.get_customer_transactions(restaurant.pk, "nope") == []

    def test_record_purchase(self, restaurant, customer):
        CustomerService.record_purchase(restaurant.pk, customer.pk, "12.00", reference="order:1")
        customer.refresh_from_db()
        assert customer.total_points == 12
        assert customer.visit_count == 1

    def test_record_purchase_wrong_restaurant(self, other_restaurant, customer):
        with pytest.raises(NotFoundError):
            CustomerService.record_purchase(other_restaurant.pk, customer.pk, "12.00")

    def test_search(self, restaurant, customer, customer_b):
        results = CustomerService.search(restaurant.pk, "jane")
        assert results == [customer_b]

    def test_customer_info(self, restaurant, customer, fund):
        fund(customer, 600)
        info = CustomerService.get_customer_info(restaurant.pk, customer.pk)

        assert info.current_tier == "silver"
        assert info.next_tier == "gold"
        assert info.points_to_next_tier == 1400
        assert info.tier_progress == 6
        assert info.points_value == "30.00"


class TestPointerResolution:
    """The device-local pointer is re-read, never trusted."""

    def test_in_memory_store_satisfies_protocol(self):
        assert isinstance(InMemoryPointerStore(), CustomerPointerStore)

    def test_resolve(self, restaurant, customer):
        store = InMemoryPointerStore()
        assert CustomerService.resolve(restaurant.pk, store) is None

        store.set(str(restaurant.pk), str(customer.pk))
        assert CustomerService.resolve(restaurant.pk, store) == customer

    def test_stale_pointer_cleared(self, restaurant, customer):
        store = InMemoryPointerStore()
        store.set(str(restaurant.pk), str(customer.pk))
        Customer.objects.filter(pk=customer.pk).update(is_active=False)

        assert CustomerService.resolve(restaurant.pk, store) is None
        assert store.get(str(restaurant.pk)) is None


class TestRewardService:
    """Catalog and redemption API."""

    def test_available_rewards_filtered_by_tier(self, restaurant, customer, reward, reward_gold):
        rewards = RewardService.get_available_rewards(restaurant.pk, customer.pk)
        assert rewards == [reward]

    def test_available_rewards_include_unaffordable(self, restaurant, customer, reward, reward_expensive):
        """Affordability is not a filter; the engine decides at redemption."""
        rewards = RewardService.get_available_rewards(restaurant.pk, customer.pk)
        assert set(rewards) == {reward, reward_expensive}

    def test_gold_customer_sees_gold_rewards(self, restaurant, customer, reward, reward_gold, fund):
        fund(customer, 2000)
        rewards = RewardService.get_available_rewards(restaurant.pk, customer.pk)
        assert set(rewards) == {reward, reward_gold}

    def test_inactive_rewards_hidden(self, restaurant, customer, reward):
        RewardService.set_reward_availability(reward.pk, False)
        assert RewardService.get_available_rewards(restaurant.pk, customer.pk) == []
        assert RewardService.get_rewards(restaurant.pk, only_active=False) == [reward]

    def test_available_rewards_unknown_customer(self, restaurant):
        with pytest.raises(NotFoundError):
            RewardService.get_available_rewards(restaurant.pk, "00000000-0000-0000-0000-000000000000")

    def test_redeem_reward(self, restaurant, customer, reward, fund):
        fund(customer, 100)
        receipt = RewardService.redeem_reward(restaurant.pk, customer.pk, reward.pk)

        assert receipt.balance_after == 25
        assert CustomerService.get_customer(restaurant.pk, customer.pk).total_points == 25

    def test_publish_reward(self, restaurant):
        reward = RewardService.publish_reward(
            restaurant.pk, "Milkshake", 120, category="drink", min_tier="silver"
        )
        assert reward.points_required == 120
        assert reward.min_tier == "silver"
        assert reward.is_active

    @pytest.mark.parametrize("points", [0, -5, "100", True])
    def test_publish_reward_invalid_points(self, restaurant, points):
        with pytest.raises(ValidationError):
            RewardService.publish_reward(restaurant.pk, "Broken", points)

    def test_publish_reward_unknown_tier(self, restaurant):
        with pytest.raises(ValidationError):
            RewardService.publish_reward(restaurant.pk, "Broken", 10, min_tier="diamond")

    def test_set_availability_unknown(self, db):
        with pytest.raises(NotFoundError):
            RewardService.set_reward_availability("00000000-0000-0000-0000-000000000000", True)

    def test_find_redemption(self, restaurant, other_restaurant, customer, reward, fund):
        fund(customer, 100)
        receipt = RewardService.redeem_reward(restaurant.pk, customer.pk, reward.pk)

        entry = RewardService.find_redemption(restaurant.pk, f"  {receipt.redemption_code.lower()} ")
        assert entry is not None
        assert entry.customer == customer
        assert entry.reward == reward
        assert RewardService.find_redemption(other_restaurant.pk, receipt.redemption_code) is None
        assert RewardService.find_redemption(restaurant.pk, "") is None


class TestStats:
    def test_restaurant_stats(self, restaurant, customer, customer_b, reward, fund):
        CustomerService.record_purchase(restaurant.pk, customer.pk, "100.00")
        fund(customer_b, 80)
        RewardService.redeem_reward(restaurant.pk, customer.pk, reward.pk)

        result = stats.restaurant_stats(restaurant.pk)

        assert result.total_customers == 2
        assert result.total_rewards == 1
        assert result.total_revenue == Decimal("100.00")
        assert result.total_points_issued == 180
        assert result.total_points_redeemed == 75

    def test_system_stats(self, restaurant, other_restaurant, customer, reward):
        result = stats.system_stats()
        assert result.total_restaurants == 2
        assert result.total_customers == 1
        assert result.total_points_issued == 0
        assert result.total_revenue == Decimal("0")


class TestErrors:
    def test_as_dict(self):
        err = NotFoundError("CUSTOMER_NOT_FOUND", customer_id="c1")
        d = err.as_dict()
        assert d["code"] == "CUSTOMER_NOT_FOUND"
        assert d["message"] == "Customer not found"
        assert d["data"]["customer_id"] == "c1"

    def test_default_code(self):
        err = ValidationError()
        assert err.code == "VALIDATION_ERROR"
        assert isinstance(err, RewardmanError)
        assert not err.retryable

    def test_custom_message(self):
        assert ValidationError(message="Custom msg").message == "Custom msg"


class TestRebuildCommand:
    def test_rebuilds_drifted_customers(self, customer, customer_b, fund):
        fund(customer, 100)
        fund(customer_b, 100)
        Customer.objects.filter(pk=customer.pk).update(total_points=5)

        out = StringIO()
        call_command("rewardman_rebuild_balances", stdout=out)

        assert "Rebuilt 1 customer balance(s)." in out.getvalue()
        customer.refresh_from_db()
        assert customer.total_points == 100

    def test_filter_by_restaurant(self, customer, fund):
        fund(customer, 100)
        Customer.objects.filter(pk=customer.pk).update(total_points=5)

        out = StringIO()
        call_command("rewardman_rebuild_balances", restaurant="taco-town", stdout=out)

        assert "Rebuilt 0" in out.getvalue()

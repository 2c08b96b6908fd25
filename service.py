"""
Rewardman public API.

RewardService:
    get_available_rewards(restaurant_id, customer_id) - Rewards the tier unlocks
    redeem_reward(restaurant_id, customer_id, reward_id) - Redeem (RedemptionEngine)

CustomerService:
    get_customer(restaurant_id, customer_id)           - Current aggregate
    get_customer_transactions(restaurant_id, customer_id) - Ledger, newest first
    get_customer_by_email / create_customer           - Enrollment and login lookups
"""

from decimal import Decimal

from rewardman.conf import rewardman_settings
from rewardman.models import Customer, EntryType, LedgerEntry, Reward
from rewardman.protocols import CustomerInfo, CustomerPointerStore
from rewardman.services import customer as customer_service
from rewardman.services import ledger
from rewardman.services import reward as reward_service
from rewardman.services.redemption import RedemptionEngine, RedemptionReceipt
from rewardman.tiers import get_policy


class RewardService:
    """
    Reward catalog and redemption API.

    Uses @classmethod for extensibility.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def get_available_rewards(cls, restaurant_id, customer_id) -> list[Reward]:
        """
        Active rewards whose min_tier the customer has reached.

        Raises:
            NotFoundError: Customer missing or inactive
        """
        return reward_service.available_rewards(restaurant_id, customer_id)

    @classmethod
    def redeem_reward(cls, restaurant_id, customer_id, reward_id, created_by: str = "") -> RedemptionReceipt:
        """
        Redeem a reward. See RedemptionEngine.redeem for the error contract.
        """
        return RedemptionEngine.redeem(
            customer_id,
            reward_id,
            restaurant_id=restaurant_id,
            created_by=created_by,
        )

    # ======================================================================
    # STAFF API
    # ======================================================================

    @classmethod
    def get_rewards(cls, restaurant_id, only_active: bool = True) -> list[Reward]:
        return reward_service.rewards(restaurant_id, only_active=only_active)

    @classmethod
    def publish_reward(cls, restaurant_id, name: str, points_required: int, **fields) -> Reward:
        return reward_service.publish(restaurant_id, name, points_required, **fields)

    @classmethod
    def set_reward_availability(cls, reward_id, is_active: bool) -> Reward:
        return reward_service.set_availability(reward_id, is_active)

    @classmethod
    def find_redemption(cls, restaurant_id, redemption_code: str) -> LedgerEntry | None:
        """Staff lookup of the redemption a customer is presenting."""
        return reward_service.find_redemption(restaurant_id, redemption_code)


class CustomerService:
    """
    Customer-facing loyalty API.

    Uses @classmethod for extensibility.
    """

    # ======================================================================
    # CORE API
    # ======================================================================

    @classmethod
    def get_customer(cls, restaurant_id, customer_id) -> Customer | None:
        return customer_service.get(restaurant_id, customer_id)

    @classmethod
    def get_customer_transactions(
        cls,
        restaurant_id,
        customer_id,
        limit: int | None = None,
    ) -> list[LedgerEntry]:
        """Ledger entries, newest first (the whole history when limit is None)."""
        return customer_service.transactions(restaurant_id, customer_id, limit=limit)

    @classmethod
    def get_customer_by_email(cls, restaurant_id, email: str) -> Customer | None:
        return customer_service.get_by_email(restaurant_id, email)

    @classmethod
    def create_customer(cls, restaurant_id, first_name: str, last_name: str, email: str, **fields) -> Customer:
        return customer_service.create(restaurant_id, first_name, last_name, email, **fields)

    # ======================================================================
    # CONVENIENCE API
    # ======================================================================

    @classmethod
    def get_customer_info(cls, restaurant_id, customer_id) -> CustomerInfo | None:
        """Wallet snapshot with tier standing and points value."""
        cust = cls.get_customer(restaurant_id, customer_id)
        if not cust:
            return None

        standing = get_policy().classify(cust.lifetime_points)
        value = Decimal(cust.total_points) * Decimal(str(rewardman_settings.POINT_VALUE))
        return CustomerInfo(
            id=str(cust.pk),
            restaurant_id=str(cust.restaurant_id),
            name=cust.name,
            email=cust.email,
            total_points=cust.total_points,
            lifetime_points=cust.lifetime_points,
            current_tier=standing.tier,
            tier_progress=standing.progress,
            next_tier=standing.next_tier,
            points_to_next_tier=standing.points_to_next,
            points_value=f"{value:.2f}",
        )

    @classmethod
    def resolve(cls, restaurant_id, store: CustomerPointerStore) -> Customer | None:
        """
        Dereference the device-local customer pointer.

        Always re-reads the customer; a stale pointer is cleared.
        """
        customer_id = store.get(str(restaurant_id))
        if not customer_id:
            return None
        cust = cls.get_customer(restaurant_id, customer_id)
        if cust is None:
            store.clear(str(restaurant_id))
        return cust

    @classmethod
    def search(cls, restaurant_id, query: str = "", limit: int = 20) -> list[Customer]:
        return customer_service.search(restaurant_id, query, limit=limit)

    @classmethod
    def record_purchase(cls, restaurant_id, customer_id, amount_spent, **fields) -> LedgerEntry:
        cust = ledger.get_customer(customer_id, restaurant_id=restaurant_id)
        return ledger.record_purchase(cust, amount_spent, **fields)

    @classmethod
    def award_bonus(cls, restaurant_id, customer_id, points: int, description: str = "", **fields) -> LedgerEntry:
        cust = ledger.get_customer(customer_id, restaurant_id=restaurant_id)
        return ledger.award(cust, EntryType.BONUS, points, description, **fields)

    @classmethod
    def award_referral(cls, restaurant_id, customer_id, points: int, description: str = "", **fields) -> LedgerEntry:
        cust = ledger.get_customer(customer_id, restaurant_id=restaurant_id)
        return ledger.award(cust, EntryType.REFERRAL, points, description, **fields)

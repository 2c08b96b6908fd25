"""
Django Rewardman - Restaurant loyalty points.

Usage:
    from rewardman import RewardService, CustomerService

    customer = CustomerService.create_customer(restaurant.id, "Ana", "Lima", "ana@example.com")
    CustomerService.record_purchase(restaurant.id, customer.id, "42.50")
    rewards = RewardService.get_available_rewards(restaurant.id, customer.id)
    receipt = RewardService.redeem_reward(restaurant.id, customer.id, rewards[0].id)

    # Customer-facing flow
    from rewardman import RedemptionSession
    session = RedemptionSession(restaurant.id, customer.id, reward.id)
    session.confirm()
    session.staff_confirm(receipt.redemption_code)
"""


def __getattr__(name):
    if name == "RewardService":
        from rewardman.service import RewardService

        return RewardService
    if name == "CustomerService":
        from rewardman.service import CustomerService

        return CustomerService
    if name == "RedemptionEngine":
        from rewardman.services.redemption import RedemptionEngine

        return RedemptionEngine
    if name == "RedemptionSession":
        from rewardman.session import RedemptionSession

        return RedemptionSession
    if name == "TierPolicy":
        from rewardman.tiers import TierPolicy

        return TierPolicy
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "RewardService",
    "CustomerService",
    "RedemptionEngine",
    "RedemptionSession",
    "TierPolicy",
]
__version__ = "0.1.0"

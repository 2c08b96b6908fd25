"""Rewardman exceptions."""


class RewardmanError(Exception):
    """
    Structured exception for loyalty operations.

    Carries a machine-readable code, a human message and free-form data.

    Usage:
        try:
            RewardService.redeem_reward(restaurant_id, customer_id, reward_id)
        except RewardmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show_balance(e.data["available"])
    """

    default_code = "REWARDMAN_ERROR"
    retryable = False

    _default_messages = {
        "REWARDMAN_ERROR": "Loyalty operation failed",
        "VALIDATION_ERROR": "Invalid loyalty data",
        "INVALID_POINTS": "Invalid points amount",
        "INVALID_ENTRY_TYPE": "Unknown ledger entry type",
        "REWARD_REQUIRED": "Redemption entries must reference a reward",
        "REWARD_NOT_ALLOWED": "Only redemption entries may reference a reward",
        "INVALID_EMAIL": "Invalid email address",
        "DUPLICATE_EMAIL": "A customer with this email already exists",
        "LEDGER_IMMUTABLE": "Ledger entries cannot be modified",
        "NOT_FOUND": "Record not found",
        "RESTAURANT_NOT_FOUND": "Restaurant not found",
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "REWARD_NOT_FOUND": "Reward not found or unavailable",
        "INELIGIBLE_TIER": "Customer tier is too low for this reward",
        "INSUFFICIENT_POINTS": "Insufficient points for redemption",
        "CONCURRENCY_CONFLICT": "Balance changed concurrently, please retry",
        "INVALID_TRANSITION": "Redemption step not allowed",
        "CODE_MISMATCH": "Redemption code does not match",
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(f"{self.code}: {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class ValidationError(RewardmanError):
    """Malformed ledger entry or enrollment data."""

    default_code = "VALIDATION_ERROR"


class NotFoundError(RewardmanError):
    """Reward, customer or restaurant missing or inactive."""

    default_code = "NOT_FOUND"


class IneligibleTierError(RewardmanError):
    default_code = "INELIGIBLE_TIER"


class InsufficientPointsError(RewardmanError):
    default_code = "INSUFFICIENT_POINTS"


class ConcurrencyConflictError(RewardmanError):
    """Lost the race on the customer aggregate. Safe to retry once."""

    default_code = "CONCURRENCY_CONFLICT"
    retryable = True


class SessionStateError(RewardmanError):
    """Transition not defined for the current redemption session state."""

    default_code = "INVALID_TRANSITION"

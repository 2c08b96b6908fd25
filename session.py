"""
Redemption session - the customer-facing redemption flow.

    confirm --confirm()--> processing --ok--> issued --staff_confirm()--> staff_confirmed
       |                       |
    cancel()               error -> confirm (error re-raised)

A session lives for one (customer, reward) selection and is never
persisted; the ledger entry written by the engine is the durable record.
Once points are deducted there is no way back to confirm: a new
redemption is a new session.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from django.utils import timezone

from rewardman.conf import rewardman_settings
from rewardman.exceptions import ConcurrencyConflictError, SessionStateError
from rewardman.services.redemption import RedemptionReceipt

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CONFIRM = "confirm"
    PROCESSING = "processing"
    ISSUED = "issued"
    STAFF_CONFIRMED = "staff_confirmed"


Redeemer = Callable[[str, str, str], RedemptionReceipt]


def _engine_redeemer(restaurant_id, customer_id, reward_id) -> RedemptionReceipt:
    from rewardman.service import RewardService

    return RewardService.redeem_reward(restaurant_id, customer_id, reward_id)


class RedemptionSession:
    """
    State machine around a single redemption attempt.

    Args:
        restaurant_id: Restaurant scope
        customer_id: Redeeming customer
        reward_id: Selected reward
        redeemer: Callable(restaurant_id, customer_id, reward_id) -> receipt;
            defaults to RewardService.redeem_reward
        clock: Callable returning "now" (timezone-aware)
    """

    def __init__(
        self,
        restaurant_id,
        customer_id,
        reward_id,
        redeemer: Redeemer | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.restaurant_id = restaurant_id
        self.customer_id = customer_id
        self.reward_id = reward_id
        self._redeem = redeemer or _engine_redeemer
        self._clock = clock

        self.state = SessionState.CONFIRM
        self.closed = False
        self.receipt: RedemptionReceipt | None = None
        self.last_error: Exception | None = None

        self.created_at = clock()
        self.issued_at: datetime | None = None
        self.staff_confirmed_at: datetime | None = None

    def __repr__(self):
        return f"<RedemptionSession {self.reward_id} {self.state.value}{' closed' if self.closed else ''}>"

    @property
    def redemption_code(self) -> str:
        return self.receipt.redemption_code if self.receipt else ""

    def _require(self, *states: SessionState, action: str) -> None:
        if self.closed or self.state not in states:
            raise SessionStateError(
                state=self.state.value,
                closed=self.closed,
                action=action,
            )

    def confirm(self) -> RedemptionReceipt:
        """
        Confirm the redemption: confirm -> processing -> issued.

        On failure the session returns to confirm and the error is
        re-raised. A ConcurrencyConflictError is retried up to
        REDEMPTION_CONFLICT_RETRIES times first.
        """
        self._require(SessionState.CONFIRM, action="confirm")
        self.state = SessionState.PROCESSING
        self.last_error = None

        retries = rewardman_settings.REDEMPTION_CONFLICT_RETRIES
        attempt = 0
        while True:
            try:
                receipt = self._redeem(self.restaurant_id, self.customer_id, self.reward_id)
                break
            except ConcurrencyConflictError as e:
                if attempt < retries:
                    attempt += 1
                    logger.info("Retrying redemption after conflict (attempt %d)", attempt)
                    continue
                self._fail(e)
                raise
            except Exception as e:
                self._fail(e)
                raise

        self.receipt = receipt
        self.issued_at = self._clock()
        self.state = SessionState.ISSUED
        return receipt

    def _fail(self, error: Exception) -> None:
        logger.info("Redemption failed, back to confirm: %s", getattr(error, "code", error))
        self.last_error = error
        self.state = SessionState.CONFIRM

    def cancel(self) -> None:
        """Discard the session before confirming. No side effects."""
        self._require(SessionState.CONFIRM, action="cancel")
        self.closed = True

    def staff_confirm(self, code: str | None = None) -> None:
        """Staff verified the code: issued -> staff_confirmed."""
        self._require(SessionState.ISSUED, action="staff_confirm")
        if code is not None and code.strip().upper() != self.redemption_code:
            raise SessionStateError("CODE_MISMATCH", state=self.state.value)
        self.staff_confirmed_at = self._clock()
        self.state = SessionState.STAFF_CONFIRMED

    @property
    def closes_at(self) -> datetime | None:
        if self.staff_confirmed_at is None:
            return None
        return self.staff_confirmed_at + timedelta(
            seconds=rewardman_settings.STAFF_CONFIRM_DISPLAY_SECONDS
        )

    def should_close(self, now: datetime | None = None) -> bool:
        """True once the success screen has been shown long enough."""
        if self.closed or self.state != SessionState.STAFF_CONFIRMED:
            return False
        return (now or self._clock()) >= self.closes_at

    def close(self) -> None:
        """Tear the session down. Not allowed while processing."""
        if self.state == SessionState.PROCESSING:
            raise SessionStateError(state=self.state.value, action="close")
        self.closed = True

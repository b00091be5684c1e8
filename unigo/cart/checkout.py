"""Checkout submission state machine.

Idle -> Submitting -> Settled (success or failure) -> Idle.

A submit arriving while another is Submitting is ignored rather than
queued. Nothing is retried automatically.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from unigo.auth.context import AuthContext
from unigo.errors import CheckoutInProgressError, UniGoError
from unigo.logging import get_logger
from unigo.services.models import Fulfilment

from .service import CartController

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class CheckoutStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IGNORED = "ignored"


@dataclass
class CheckoutResult:
    """Settled outcome of one submit call."""
    status: CheckoutStatus
    order_id: Optional[str] = None
    error: Optional[UniGoError] = None

    @property
    def succeeded(self) -> bool:
        return self.status == CheckoutStatus.SUCCEEDED

    def raise_for_error(self) -> None:
        """Re-raise the failure so the caller's error handling sees it."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict:
        data = {"status": self.status.value, "order_id": self.order_id}
        if self.error is not None:
            data.update(self.error.to_dict())
        return data


class CheckoutSubmission:
    """Guards one cart controller against duplicate in-flight checkouts."""

    def __init__(self, controller: CartController):
        self.controller = controller
        self.state = CheckoutState.IDLE
        self.last_result: Optional[CheckoutResult] = None

    @property
    def in_flight(self) -> bool:
        return self.state == CheckoutState.SUBMITTING

    async def submit(self, auth: AuthContext, fulfilment: Fulfilment) -> CheckoutResult:
        """
        Place the order unless a submission is already in flight.

        UniGoError failures settle as FAILED with the cart intact; anything
        else propagates. The state is back to IDLE when this returns.
        """
        if self.in_flight:
            logger.warning("Ignoring checkout submit while another is in flight")
            return CheckoutResult(
                status=CheckoutStatus.IGNORED,
                error=CheckoutInProgressError(),
            )

        self.state = CheckoutState.SUBMITTING
        try:
            order_id = await self.controller.place_order(auth, fulfilment)
            result = CheckoutResult(status=CheckoutStatus.SUCCEEDED, order_id=order_id)
        except UniGoError as e:
            logger.info(f"Checkout failed: {e.code}")
            result = CheckoutResult(status=CheckoutStatus.FAILED, error=e)
        finally:
            self.state = CheckoutState.IDLE

        self.last_result = result
        return result

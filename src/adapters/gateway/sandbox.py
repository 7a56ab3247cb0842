"""
Sandbox payment gateway adapter - Implements PaymentGateway protocol.

Simulates a popup checkout in test mode: no card is charged, and the
outcome arrives on a timer thread, the way the real SDK calls back after
the payer closes the popup.
"""

import logging
import secrets
import threading
from collections.abc import Callable
from typing import Any

from src.domain.models import ChargeRequest

logger = logging.getLogger(__name__)

MODES = ("authorize", "cancel", "error", "silent")


class SandboxPaymentGateway:
    """
    Implements PaymentGateway protocol with simulated outcomes.

    Uses structural subtyping - no explicit inheritance from Protocol.

    Modes:
    - authorize: simulated capture, reports a gateway transaction reference
    - cancel: payer closed the popup
    - error: processing failure
    - silent: never calls back (exercises the adapter timeout)
    """

    def __init__(self, mode: str = "authorize", delay_seconds: float = 0.0) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown sandbox gateway mode: {mode}")
        self.mode = mode
        self.delay_seconds = delay_seconds

    def open_checkout(
        self,
        request: ChargeRequest,
        on_authorized: Callable[[str, dict[str, Any]], None],
        on_cancelled: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Schedule the simulated outcome and return immediately."""
        logger.info(
            "[SANDBOX] Checkout %s: %s %s for %s (mode=%s)",
            request.reference,
            request.amount_minor,
            request.currency,
            request.payer_email,
            self.mode,
        )
        if self.mode == "silent":
            return

        def fire() -> None:
            if self.mode == "authorize":
                on_authorized(request.reference, self._success_response(request))
            elif self.mode == "cancel":
                on_cancelled()
            else:
                on_error("sandbox: simulated processing error")

        timer = threading.Timer(self.delay_seconds, fire)
        timer.daemon = True
        timer.start()

    def _success_response(self, request: ChargeRequest) -> dict[str, Any]:
        # Shape of the inline SDK success payload
        return {
            "reference": request.reference,
            "trans": str(secrets.randbelow(10**10)),
            "transaction": str(secrets.randbelow(10**10)),
            "status": "success",
            "message": "Approved",
            "trxref": request.reference,
            "amount": request.amount_minor,
            "currency": request.currency,
            "sandbox": True,
        }

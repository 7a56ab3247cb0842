"""
Payment gateway adapter - Callback contract around a popup-style gateway.

The external gateway resolves a checkout by invoking one of three
callbacks, at some later time and possibly on another thread. This module
turns that into a single blocking call that returns exactly one
ChargeOutcome:

- AUTHORIZED: funds captured, gateway reference attached
- CANCELLED: payer abandoned the flow, no funds moved
- ERRORED: gateway reported a failure, funds may or may not have moved
- TIMED_OUT: no callback within the timeout, treated like ERRORED

Guarantees:
- at most one outcome per charge; later callbacks are logged and ignored
- the call never blocks longer than timeout_seconds
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidRequest
from .models import EMAIL_RE, ChargeOutcome, ChargeRequest
from .ports import ChargeResult, PaymentGateway

logger = logging.getLogger(__name__)


class _OutcomeLatch:
    """First-callback-wins holder for a single charge outcome."""

    def __init__(self, reference: str) -> None:
        self._reference = reference
        self._lock = threading.Lock()
        self._resolved = threading.Event()
        self._outcome: ChargeOutcome | None = None

    def _resolve(self, outcome: ChargeOutcome) -> bool:
        with self._lock:
            if self._outcome is not None:
                if outcome.result == ChargeResult.AUTHORIZED:
                    # Money moved after we already answered the caller.
                    logger.error(
                        "Late authorization ignored for %s (gateway ref %s, already %s)",
                        self._reference,
                        outcome.gateway_reference,
                        self._outcome.result.value,
                    )
                else:
                    logger.warning(
                        "Duplicate %s callback ignored for %s",
                        outcome.result.value,
                        self._reference,
                    )
                return False
            self._outcome = outcome
        self._resolved.set()
        return True

    def authorized(self, gateway_reference: str, raw: dict[str, Any] | None = None) -> None:
        self._resolve(
            ChargeOutcome(
                result=ChargeResult.AUTHORIZED,
                reference=self._reference,
                gateway_reference=gateway_reference,
                raw=dict(raw or {}),
            )
        )

    def cancelled(self) -> None:
        self._resolve(ChargeOutcome(result=ChargeResult.CANCELLED, reference=self._reference))

    def errored(self, reason: str) -> None:
        self._resolve(
            ChargeOutcome(result=ChargeResult.ERRORED, reference=self._reference, reason=reason)
        )

    def wait(self, timeout: float) -> ChargeOutcome:
        if not self._resolved.wait(timeout):
            self._resolve(
                ChargeOutcome(
                    result=ChargeResult.TIMED_OUT,
                    reference=self._reference,
                    reason=f"no gateway callback within {timeout:g}s",
                )
            )
        assert self._outcome is not None
        return self._outcome


@dataclass
class PaymentGatewayAdapter:
    """
    Domain-side wrapper around a PaymentGateway port.

    Validates charge requests before any gateway interaction, generates
    per-attempt references and collapses the callback flow into one
    ChargeOutcome.
    """

    gateway: PaymentGateway
    timeout_seconds: float = 300.0
    reference_prefix: str = "EVT"
    _clock: Any = field(default=time.time, repr=False)

    def new_reference(self) -> str:
        """
        Generate a unique reference for one payment attempt.

        Format: PREFIX_<epoch millis>_<16 random hex chars>. The random part
        gives 64 bits per millisecond, so collisions are negligible.
        """
        millis = int(self._clock() * 1000)
        return f"{self.reference_prefix}_{millis}_{secrets.token_hex(8)}"

    def build_request(
        self,
        amount_minor: int,
        currency: str,
        payer_email: str,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChargeRequest:
        """
        Validate inputs and build a ChargeRequest.

        Raises:
            InvalidRequest: amount not a positive integer, currency not a
                3-letter code, or payer email malformed
        """
        if isinstance(amount_minor, bool) or not isinstance(amount_minor, int):
            raise InvalidRequest(f"amount_minor must be an integer: {amount_minor!r}")
        if amount_minor <= 0:
            raise InvalidRequest(f"amount_minor must be positive: {amount_minor}")
        if not (isinstance(currency, str) and len(currency) == 3 and currency.isalpha()):
            raise InvalidRequest(f"currency must be a 3-letter code: {currency!r}")
        if not payer_email or not EMAIL_RE.match(payer_email):
            raise InvalidRequest("payer_email is malformed")

        return ChargeRequest(
            amount_minor=amount_minor,
            currency=currency.upper(),
            payer_email=payer_email,
            reference=reference or self.new_reference(),
            metadata=dict(metadata or {}),
        )

    def charge(
        self,
        amount_minor: int,
        currency: str,
        payer_email: str,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChargeOutcome:
        """
        Run one checkout and wait for its single outcome.

        Args:
            amount_minor: Amount in minor units, must be > 0
            currency: ISO 4217 style code
            payer_email: Email the gateway bills
            reference: Attempt reference; generated when omitted
            metadata: Extra data shown on the gateway dashboard

        Returns:
            ChargeOutcome with result AUTHORIZED, CANCELLED, ERRORED or TIMED_OUT

        Raises:
            InvalidRequest: Preconditions violated (nothing sent to the gateway)
        """
        request = self.build_request(amount_minor, currency, payer_email, reference, metadata)
        latch = _OutcomeLatch(request.reference)

        logger.info(
            "Opening checkout %s for %s %s",
            request.reference,
            request.amount_minor,
            request.currency,
        )
        try:
            self.gateway.open_checkout(
                request,
                on_authorized=latch.authorized,
                on_cancelled=latch.cancelled,
                on_error=latch.errored,
            )
        except Exception as e:
            logger.exception("Gateway raised while opening checkout %s", request.reference)
            latch.errored(f"gateway raised: {e}")

        outcome = latch.wait(self.timeout_seconds)
        logger.info("Checkout %s resolved: %s", request.reference, outcome.result.value)
        return outcome

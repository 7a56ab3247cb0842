"""
Registration transaction coordinator - Attempt state machine.

This module reconciles an asynchronous, callback-driven payment
authorization with a local registration write. The two cannot be made
atomic: the gateway knows nothing of the store, and the store cannot
un-charge a card. The coordinator's job is to make every way the pair can
fail land in a distinct, named outcome.

Attempt State Machine
=====================

States:
- IDLE: Initial state; also where a cancelled payment returns to
- PROCESSING: Guards passed, store write or gateway charge in flight
- SUCCEEDED: Registration recorded (terminal)
- FAILED: Error kind attached (terminal)

Transitions:
    IDLE -> PROCESSING        (event open, no confirmed registration)
    PROCESSING -> SUCCEEDED   (store write succeeded, or lost a free-path race)
    PROCESSING -> FAILED      (store unavailable, payment indeterminate,
                               paid but unrecorded)
    PROCESSING -> IDLE        (payer cancelled the checkout)

Guard rejections (InvalidRequest, RegistrationClosed, AlreadyRegistered)
never leave IDLE. The open-for-registration guard runs first, then attendee
and amount validation, then the duplicate check.

Failure policy:
- Free path: StoreUnavailable is retried a bounded number of times, since
  no money has moved.
- Paid path: nothing is retried. A retry is a new attempt with a new
  reference started by the attendee.
- Authorized but the write failed: PaidButUnrecorded, never a generic
  failure. The case is also handed to the reconciliation log.

The duplicate guard is best-effort (check-then-create). The store's
uniqueness constraint on (event_id, attendee_email) among confirmed rows
is the actual backstop.
"""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .exceptions import (
    AlreadyRegistered,
    Conflict,
    InvalidAmount,
    InvalidRequest,
    PaidButUnrecorded,
    PaymentIndeterminate,
    RegistrationClosed,
    RegistrationError,
    RetryableStoreError,
    StoreError,
)
from .models import (
    EMAIL_RE,
    AttendeeInfo,
    ChargeOutcome,
    Event,
    Registration,
    RegistrationDraft,
    RegistrationOutcome,
    normalize_email,
)
from .money import from_minor_units, to_minor_units
from .payments import PaymentGatewayAdapter
from .ports import (
    AttemptState,
    ChargeResult,
    PaymentStatus,
    ReconciliationLog,
    RegistrationRepository,
    TicketType,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistrationCoordinator:
    """
    Domain service for event registration.

    Orchestrates guard checks, the free/paid branch, the gateway charge
    and the registration write. Stateless between attempts.
    """

    repository: RegistrationRepository
    payments: PaymentGatewayAdapter
    reconciliation: ReconciliationLog | None = None
    currency: str = "GHS"
    store_retry_attempts: int = 3
    store_retry_backoff_seconds: float = 0.2
    sleep: Callable[[float], None] = time.sleep

    def register(self, event: Event, attendee: AttendeeInfo) -> Iterator[RegistrationOutcome]:
        """
        Run one registration attempt, yielding each state entered.

        Args:
            event: Event being registered for
            attendee: Attendee details (email will be normalized)

        Yields:
            RegistrationOutcome snapshots; the last one is terminal
        """
        try:
            self._guard_open(event)
            email = self._validate_attendee(attendee)
            amount_minor = self._amount_minor(event)
            self._guard_duplicate(event, email)
        except RegistrationError as e:
            logger.info("Registration for event %s rejected: %s", event.id, e.kind)
            yield RegistrationOutcome(state=AttemptState.IDLE, error=e)
            return

        if amount_minor == 0:
            yield from self._register_free(event, attendee, email)
        else:
            yield from self._register_paid(event, attendee, email, amount_minor)

    def run(self, event: Event, attendee: AttendeeInfo) -> RegistrationOutcome:
        """Drive register() to completion and return the terminal outcome."""
        outcome = RegistrationOutcome(state=AttemptState.IDLE)
        for outcome in self.register(event, attendee):
            logger.debug("Event %s attempt state: %s", event.id, outcome.state.value)
        return outcome

    def _validate_attendee(self, attendee: AttendeeInfo) -> str:
        email = normalize_email(attendee.email or "")
        if not EMAIL_RE.match(email):
            raise InvalidRequest("attendee email is malformed")
        if not (attendee.name or "").strip():
            raise InvalidRequest("attendee name is required")
        return email

    def _amount_minor(self, event: Event) -> int:
        if event.currency.upper() != self.currency.upper():
            raise InvalidRequest(
                f"event currency {event.currency} differs from deployment currency {self.currency}"
            )
        amount_minor = to_minor_units(event.price)
        if amount_minor == 0 and event.price != 0:
            raise InvalidAmount(f"price {event.price} is below the smallest chargeable unit")
        return amount_minor

    def _guard_open(self, event: Event) -> None:
        if not event.is_open_for_registration:
            raise RegistrationClosed(event.id)

    def _guard_duplicate(self, event: Event, email: str) -> None:
        try:
            existing = self.repository.find_confirmed(event.id, email)
        except StoreError as e:
            raise RetryableStoreError(str(e)) from e
        if existing is not None:
            raise AlreadyRegistered(email)

    def _register_free(
        self, event: Event, attendee: AttendeeInfo, email: str
    ) -> Iterator[RegistrationOutcome]:
        yield RegistrationOutcome(state=AttemptState.PROCESSING)

        draft = RegistrationDraft(
            event_id=event.id,
            attendee_email=email,
            attendee_name=attendee.name,
            attendee_phone=attendee.phone,
            amount_paid=Decimal("0"),
            currency=self.currency,
            ticket_type=TicketType.FREE,
            payment_status=PaymentStatus.COMPLETED,
        )

        attempts = max(1, self.store_retry_attempts)
        for attempt in range(1, attempts + 1):
            try:
                registration = self.repository.create(draft)
            except Conflict:
                logger.warning("Lost registration race for event %s, %s", event.id, email)
                yield RegistrationOutcome(
                    state=AttemptState.SUCCEEDED,
                    registration=self._existing_registration(event.id, email),
                    error=AlreadyRegistered(email),
                )
                return
            except StoreError as e:
                if attempt < attempts:
                    logger.warning(
                        "Store unavailable for free registration (attempt %d/%d): %s",
                        attempt,
                        attempts,
                        e,
                    )
                    self.sleep(self.store_retry_backoff_seconds * attempt)
                    continue
                logger.error("Giving up free registration for event %s after %d attempts", event.id, attempts)
                yield RegistrationOutcome(state=AttemptState.FAILED, error=RetryableStoreError(str(e)))
                return

            logger.info("Free registration %s created for event %s", registration.id, event.id)
            yield RegistrationOutcome(state=AttemptState.SUCCEEDED, registration=registration)
            return

    def _register_paid(
        self, event: Event, attendee: AttendeeInfo, email: str, amount_minor: int
    ) -> Iterator[RegistrationOutcome]:
        reference = self.payments.new_reference()
        yield RegistrationOutcome(state=AttemptState.PROCESSING, reference=reference)

        try:
            outcome = self.payments.charge(
                amount_minor=amount_minor,
                currency=self.currency,
                payer_email=email,
                reference=reference,
                metadata=self._charge_metadata(event, attendee),
            )
        except InvalidRequest as e:
            yield RegistrationOutcome(state=AttemptState.FAILED, error=e, reference=reference)
            return

        if outcome.result == ChargeResult.CANCELLED:
            logger.warning("Payment %s cancelled by attendee", reference)
            yield RegistrationOutcome(state=AttemptState.IDLE, reference=reference, cancelled=True)
            return

        if outcome.result != ChargeResult.AUTHORIZED:
            error = PaymentIndeterminate(reference, outcome.reason)
            logger.error(
                "Payment %s indeterminate (%s) for event %s, %s",
                reference,
                outcome.result.value,
                event.id,
                email,
            )
            self._report(error.kind, reference, event.id, email, from_minor_units(amount_minor), {
                "result": outcome.result.value,
                "reason": outcome.reason,
            })
            yield RegistrationOutcome(state=AttemptState.FAILED, error=error, reference=reference)
            return

        yield self._record_paid(event, attendee, email, amount_minor, outcome)

    def _record_paid(
        self,
        event: Event,
        attendee: AttendeeInfo,
        email: str,
        amount_minor: int,
        outcome: ChargeOutcome,
    ) -> RegistrationOutcome:
        reference = outcome.reference
        amount = from_minor_units(amount_minor)
        gateway_reference = outcome.gateway_reference
        if not gateway_reference:
            logger.warning("Gateway authorized %s without a reference; using attempt reference", reference)
            gateway_reference = reference

        try:
            registration = self.repository.create(
                RegistrationDraft(
                    event_id=event.id,
                    attendee_email=email,
                    attendee_name=attendee.name,
                    attendee_phone=attendee.phone,
                    amount_paid=amount,
                    currency=self.currency,
                    ticket_type=TicketType.PAID,
                    payment_status=PaymentStatus.COMPLETED,
                    payment_reference=gateway_reference,
                    metadata={
                        "payment_attempt_reference": reference,
                        "amount_minor": amount_minor,
                        "gateway_response": outcome.raw,
                    },
                )
            )
        except Exception as e:
            # Money already moved; any failure here must stay distinguishable.
            logger.exception(
                "PAID BUT UNRECORDED: event %s, %s, gateway ref %s, amount %s %s",
                event.id,
                email,
                gateway_reference,
                amount,
                self.currency,
            )
            error = PaidButUnrecorded(reference, gateway_reference, amount)
            self._report(error.kind, reference, event.id, email, amount, {
                "gateway_reference": gateway_reference,
                "gateway_response": outcome.raw,
                "cause": repr(e),
            })
            return RegistrationOutcome(state=AttemptState.FAILED, error=error, reference=reference)

        logger.info(
            "Paid registration %s created for event %s (ref %s)",
            registration.id,
            event.id,
            gateway_reference,
        )
        return RegistrationOutcome(
            state=AttemptState.SUCCEEDED, registration=registration, reference=reference
        )

    def _charge_metadata(self, event: Event, attendee: AttendeeInfo) -> dict[str, Any]:
        return {
            "event_id": event.id,
            "event_title": event.title,
            "attendee_name": attendee.name,
            "custom_fields": [
                {"display_name": "Event", "variable_name": "event", "value": event.title},
                {"display_name": "Attendee", "variable_name": "attendee", "value": attendee.name},
            ],
        }

    def _existing_registration(self, event_id: str, email: str) -> Registration | None:
        try:
            return self.repository.find_confirmed(event_id, email)
        except StoreError:
            logger.warning("Could not load winning registration for event %s, %s", event_id, email)
            return None

    def _report(
        self,
        kind: str,
        reference: str,
        event_id: str,
        email: str,
        amount: Decimal,
        details: dict[str, Any],
    ) -> None:
        if self.reconciliation is None:
            return
        try:
            self.reconciliation.record(kind, reference, event_id, email, amount, details)
        except Exception:
            logger.exception("Failed to write reconciliation record for %s", reference)

"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .models import ChargeRequest, Event, Registration, RegistrationDraft, RegistrationStats


class PaymentStatus(str, Enum):
    """Payment lifecycle of a registration row."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class RegistrationStatus(str, Enum):
    """Seat status of a registration row."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    WAITLIST = "waitlist"


class TicketType(str, Enum):
    FREE = "free"
    PAID = "paid"


class AttemptState(str, Enum):
    """
    Registration attempt state machine.

    State Transitions:
    - IDLE -> PROCESSING (guards passed, store write or charge started)
    - PROCESSING -> SUCCEEDED (registration recorded)
    - PROCESSING -> FAILED (error kind attached)
    - PROCESSING -> IDLE (payer cancelled the gateway flow)

    Terminal States (per attempt):
    - SUCCEEDED
    - FAILED

    A new attempt always starts from IDLE with a fresh payment reference.
    """

    IDLE = "idle"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ChargeResult(Enum):
    """How a single gateway charge resolved."""

    AUTHORIZED = "authorized"
    CANCELLED = "cancelled"
    ERRORED = "errored"
    TIMED_OUT = "timed_out"


class RegistrationRepository(Protocol):
    """Port interface for registration persistence."""

    def find_confirmed(self, event_id: str, email: str) -> "Registration | None":
        """
        Look up the confirmed registration for an event and email.

        Must reflect every write that completed before the call started.

        Args:
            event_id: Event identifier
            email: Normalized (lower-cased) attendee email

        Returns:
            The confirmed Registration, or None
        """
        ...

    def create(self, draft: "RegistrationDraft") -> "Registration":
        """
        Persist a new registration.

        The store enforces uniqueness of (event_id, attendee_email) among
        confirmed rows and of payment_reference when present.

        Raises:
            Conflict: A uniqueness constraint was violated
            StoreUnavailable: Transient infrastructure failure
        """
        ...

    def count_confirmed(self, event_id: str) -> int:
        """Count confirmed registrations. For display only, never admission control."""
        ...

    def list_for_event(self, event_id: str) -> "list[Registration]":
        """All registrations for an event, newest first."""
        ...

    def stats_for_event(self, event_id: str) -> "RegistrationStats":
        """Aggregate counts and revenue for an event."""
        ...


class EventCatalog(Protocol):
    """Port interface for read access to the externally owned event catalog."""

    def get_event(self, event_id: str) -> "Event | None":
        ...


class PaymentGateway(Protocol):
    """
    Port interface for the external payment authorization flow.

    Mirrors a popup-style SDK: the call returns immediately and the outcome
    arrives later through exactly one of the supplied callbacks, possibly
    on another thread. Implementations may misbehave (fire twice, never
    fire); the domain adapter guards against both.
    """

    def open_checkout(
        self,
        request: "ChargeRequest",
        on_authorized: Callable[[str, dict[str, Any]], None],
        on_cancelled: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """
        Start a checkout for the given charge.

        Args:
            request: Validated charge request (amount in minor units)
            on_authorized: Called with (gateway_reference, raw_response)
            on_cancelled: Called when the payer abandons the flow
            on_error: Called with a reason when processing fails
        """
        ...


class ReconciliationLog(Protocol):
    """Port interface for recording payments that need manual reconciliation."""

    def record(
        self,
        kind: str,
        reference: str,
        event_id: str,
        email: str,
        amount: object,
        details: dict[str, Any],
    ) -> None:
        ...

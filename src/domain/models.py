"""
Domain models - Value objects passed between the coordinator and its ports.

All models are immutable dataclasses. Amounts are Decimal in major units
except ChargeRequest.amount_minor, which is the gateway's integer form.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from .exceptions import InvalidAmount, InvalidRequest, RegistrationError
from .ports import (
    AttemptState,
    ChargeResult,
    PaymentStatus,
    RegistrationStatus,
    TicketType,
)

PUBLISHED = "published"

# Loose shape check only; the gateway and the inbox are the real validators.
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase, matching the de-duplication key."""
    return email.strip().lower()


@dataclass(frozen=True)
class Event:
    """Read-only view of an event owned by the external catalog."""

    id: str
    title: str
    price: Decimal = Decimal("0")
    currency: str = "GHS"
    is_published: bool = False
    status: str = "draft"
    max_attendees: int | None = None

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def is_open_for_registration(self) -> bool:
        return self.is_published and self.status == PUBLISHED


@dataclass(frozen=True)
class AttendeeInfo:
    name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class RegistrationDraft:
    """
    Registration about to be written.

    Enforces the payment invariants at construction so that no adapter can
    ever be handed a completed payment without either a zero amount or a
    gateway reference.
    """

    event_id: str
    attendee_email: str
    amount_paid: Decimal
    currency: str
    ticket_type: TicketType
    payment_status: PaymentStatus = PaymentStatus.PENDING
    status: RegistrationStatus = RegistrationStatus.CONFIRMED
    attendee_name: str | None = None
    attendee_phone: str | None = None
    payment_reference: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.amount_paid < 0:
            raise InvalidAmount(f"amount_paid must not be negative: {self.amount_paid}")
        if self.amount_paid == 0 and self.payment_reference:
            raise InvalidRequest("payment_reference set on a free registration")
        if (
            self.payment_status == PaymentStatus.COMPLETED
            and self.amount_paid > 0
            and not self.payment_reference
        ):
            raise InvalidRequest("completed paid registration requires a payment_reference")


@dataclass(frozen=True)
class Registration:
    """Durable registration row as returned by the store."""

    id: str
    event_id: str
    attendee_email: str
    amount_paid: Decimal
    currency: str
    payment_status: PaymentStatus
    status: RegistrationStatus
    ticket_type: TicketType | None = None
    attendee_name: str | None = None
    attendee_phone: str | None = None
    payment_reference: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    registration_date: datetime | None = None
    check_in_time: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RegistrationStats:
    total: int = 0
    confirmed: int = 0
    pending: int = 0
    cancelled: int = 0
    checked_in: int = 0
    revenue: Decimal = Decimal("0")


@dataclass(frozen=True)
class ChargeRequest:
    amount_minor: int
    currency: str
    payer_email: str
    reference: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChargeOutcome:
    """Single resolution of a gateway charge."""

    result: ChargeResult
    reference: str
    gateway_reference: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)
    reason: str = ""


@dataclass(frozen=True)
class RegistrationOutcome:
    """
    Snapshot of a registration attempt.

    The coordinator yields one of these per state it enters. The last one
    is terminal: it carries a registration, an error, or the cancellation
    flag.
    """

    state: AttemptState
    registration: Registration | None = None
    error: RegistrationError | None = None
    reference: str | None = None
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.SUCCEEDED

    @property
    def requires_support(self) -> bool:
        return self.error is not None and self.error.requires_support

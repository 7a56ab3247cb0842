"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from src.domain.models import Registration, RegistrationStats


class RegistrationRequest(BaseModel):
    """Request model for event registration."""

    name: str = Field(..., min_length=1, max_length=255, description="Attendee full name")
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50, description="Attendee phone number")


class RegistrationResponse(BaseModel):
    """A stored registration."""

    id: str
    event_id: str
    attendee_email: str
    attendee_name: str | None = None
    attendee_phone: str | None = None
    payment_status: str
    status: str
    ticket_type: str | None = None
    amount_paid: Decimal
    currency: str
    payment_reference: str | None = None
    registration_date: datetime | None = None
    check_in_time: datetime | None = None

    @classmethod
    def from_domain(cls, registration: Registration) -> "RegistrationResponse":
        return cls(
            id=registration.id,
            event_id=registration.event_id,
            attendee_email=registration.attendee_email,
            attendee_name=registration.attendee_name,
            attendee_phone=registration.attendee_phone,
            payment_status=registration.payment_status.value,
            status=registration.status.value,
            ticket_type=registration.ticket_type.value if registration.ticket_type else None,
            amount_paid=registration.amount_paid,
            currency=registration.currency,
            payment_reference=registration.payment_reference,
            registration_date=registration.registration_date,
            check_in_time=registration.check_in_time,
        )


class RegistrationAttemptResponse(BaseModel):
    """Result of a registration attempt that did not fail."""

    state: str
    message: str
    transitions: list[str]
    payment_reference: str | None = None
    registration: RegistrationResponse | None = None


class RegistrationCountResponse(BaseModel):
    event_id: str
    confirmed: int


class RegistrationCheckResponse(BaseModel):
    event_id: str
    email: str
    is_registered: bool
    registration: RegistrationResponse | None = None


class RegistrationStatsResponse(BaseModel):
    """Per-event registration statistics."""

    event_id: str
    total: int
    confirmed: int
    pending: int
    cancelled: int
    checked_in: int
    revenue: Decimal

    @classmethod
    def from_domain(cls, event_id: str, stats: RegistrationStats) -> "RegistrationStatsResponse":
        return cls(
            event_id=event_id,
            total=stats.total,
            confirmed=stats.confirmed,
            pending=stats.pending,
            cancelled=stats.cancelled,
            checked_in=stats.checked_in,
            revenue=stats.revenue,
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
    error: str | None = None
    payment_reference: str | None = None
    support_required: bool = False
    transitions: list[str] = Field(default_factory=list)

"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration-and-payment transaction core:
amount conversion, the payment gateway callback adapter and the
registration coordinator state machine. It defines its own port
interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

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
    StoreUnavailable,
)
from .models import (
    AttendeeInfo,
    ChargeOutcome,
    ChargeRequest,
    Event,
    Registration,
    RegistrationDraft,
    RegistrationOutcome,
    RegistrationStats,
)
from .money import from_minor_units, to_minor_units
from .payments import PaymentGatewayAdapter
from .ports import (
    AttemptState,
    ChargeResult,
    EventCatalog,
    PaymentGateway,
    PaymentStatus,
    ReconciliationLog,
    RegistrationRepository,
    RegistrationStatus,
    TicketType,
)
from .registration import RegistrationCoordinator

__all__ = [
    "AlreadyRegistered",
    "AttemptState",
    "AttendeeInfo",
    "ChargeOutcome",
    "ChargeRequest",
    "ChargeResult",
    "Conflict",
    "Event",
    "EventCatalog",
    "InvalidAmount",
    "InvalidRequest",
    "PaidButUnrecorded",
    "PaymentGateway",
    "PaymentGatewayAdapter",
    "PaymentIndeterminate",
    "PaymentStatus",
    "ReconciliationLog",
    "Registration",
    "RegistrationClosed",
    "RegistrationCoordinator",
    "RegistrationDraft",
    "RegistrationError",
    "RegistrationOutcome",
    "RegistrationRepository",
    "RegistrationStats",
    "RegistrationStatus",
    "RetryableStoreError",
    "StoreError",
    "StoreUnavailable",
    "TicketType",
    "from_minor_units",
    "to_minor_units",
]

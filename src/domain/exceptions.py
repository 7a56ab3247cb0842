"""
Domain exceptions - Semantic error types for event registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Two families live here:

- RegistrationError: the taxonomy surfaced to callers of the coordinator.
  Every terminal failure carries exactly one of these kinds.
- StoreError: the contract between the coordinator and the registration
  store. Adapters translate driver errors into these; they never reach
  the caller directly.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    kind = "registration_error"
    retryable = False
    requires_support = False
    user_message = "Registration failed"


class RegistrationClosed(RegistrationError):
    """Event is not published or not accepting registrations."""

    kind = "registration_closed"
    user_message = "Registration for this event is closed"


class AlreadyRegistered(RegistrationError):
    """A confirmed registration already exists for this event and email."""

    kind = "already_registered"
    user_message = "You are already registered for this event"


class InvalidRequest(RegistrationError):
    """Attendee details or charge request failed validation."""

    kind = "invalid_request"
    user_message = "Registration details are invalid"


class InvalidAmount(InvalidRequest):
    """Monetary amount is negative or not a number."""

    kind = "invalid_amount"


class RetryableStoreError(RegistrationError):
    """Registration store was unavailable; no money moved."""

    kind = "retryable_store_error"
    retryable = True
    user_message = "We could not save your registration. Please try again"


class PaymentIndeterminate(RegistrationError):
    """
    Gateway reported an error or never answered.

    Funds may or may not have moved. Never retried automatically: a blind
    retry could charge the attendee twice.
    """

    kind = "payment_indeterminate"
    requires_support = True
    user_message = (
        "We could not confirm your payment status. "
        "Please contact support with your payment reference before paying again"
    )

    def __init__(self, reference: str, reason: str = "") -> None:
        super().__init__(f"{reference}: {reason}" if reason else reference)
        self.reference = reference
        self.reason = reason


class PaidButUnrecorded(RegistrationError):
    """
    Gateway authorized the charge but the registration write failed.

    Money was taken without a durable registration. Must be reconciled
    manually by support.
    """

    kind = "paid_but_unrecorded"
    requires_support = True
    user_message = (
        "Your payment was received but your registration could not be saved. "
        "Please contact support with your payment reference; do not pay again"
    )

    def __init__(self, reference: str, gateway_reference: str, amount: object) -> None:
        super().__init__(f"{gateway_reference} (attempt {reference}, amount {amount})")
        self.reference = reference
        self.gateway_reference = gateway_reference
        self.amount = amount


class StoreError(Exception):
    """Base class for registration store failures."""

    pass


class Conflict(StoreError):
    """Uniqueness constraint on (event_id, email, confirmed) or reference violated."""

    pass


class StoreUnavailable(StoreError):
    """Transient infrastructure failure (connection lost, pool exhausted)."""

    pass

"""
Test doubles for the domain ports.

- ScriptedGateway: PaymentGateway answering synchronously from a script
- FailingRepository: in-memory store whose first creates raise
"""

from collections.abc import Callable
from typing import Any

from src.adapters.repository.memory import InMemoryRegistrationRepository
from src.domain.exceptions import StoreUnavailable
from src.domain.models import ChargeRequest, Registration, RegistrationDraft


class ScriptedGateway:
    """
    PaymentGateway test double that answers synchronously.

    mode: authorize | cancel | error | silent
    extra_callbacks: further callbacks fired after the first, to simulate
    a misbehaving SDK
    """

    def __init__(
        self,
        mode: str = "authorize",
        gateway_reference: str = "REF123",
        raw: dict[str, Any] | None = None,
        extra_callbacks: tuple[str, ...] = (),
    ) -> None:
        self.mode = mode
        self.gateway_reference = gateway_reference
        self.raw = raw if raw is not None else {"status": "success", "reference": gateway_reference}
        self.extra_callbacks = extra_callbacks
        self.requests: list[ChargeRequest] = []

    def open_checkout(
        self,
        request: ChargeRequest,
        on_authorized: Callable[[str, dict[str, Any]], None],
        on_cancelled: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        self.requests.append(request)
        for mode in (self.mode, *self.extra_callbacks):
            if mode == "authorize":
                on_authorized(self.gateway_reference, self.raw)
            elif mode == "cancel":
                on_cancelled()
            elif mode == "error":
                on_error("card declined by issuer")


class FailingRepository(InMemoryRegistrationRepository):
    """In-memory store whose first `failures` creates raise `error`."""

    def __init__(self, failures: int = 1, error: Exception | None = None) -> None:
        super().__init__()
        self.failures = failures
        self.error = error or StoreUnavailable("connection refused")
        self.create_calls = 0

    def create(self, draft: RegistrationDraft) -> Registration:
        self.create_calls += 1
        if self.create_calls <= self.failures:
            raise self.error
        return super().create(draft)

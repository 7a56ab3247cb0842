"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Sample events and attendees
- In-memory registration store
- Coordinator factory wired to test doubles
"""

from collections.abc import Callable
from decimal import Decimal
from typing import Any

import pytest

from src.adapters.repository.memory import InMemoryRegistrationRepository
from src.domain.models import AttendeeInfo, Event
from src.domain.payments import PaymentGatewayAdapter
from src.domain.registration import RegistrationCoordinator
from tests.doubles import ScriptedGateway


@pytest.fixture
def free_event() -> Event:
    return Event(
        id="evt-free",
        title="Community Meetup",
        price=Decimal("0"),
        currency="GHS",
        is_published=True,
        status="published",
    )


@pytest.fixture
def paid_event() -> Event:
    return Event(
        id="evt-paid",
        title="Accra Tech Summit",
        price=Decimal("50.00"),
        currency="GHS",
        is_published=True,
        status="published",
    )


@pytest.fixture
def attendee() -> AttendeeInfo:
    return AttendeeInfo(name="Ama Mensah", email="a@x.com", phone="+233201234567")


@pytest.fixture
def repository() -> InMemoryRegistrationRepository:
    return InMemoryRegistrationRepository()


@pytest.fixture
def make_coordinator() -> Callable[..., RegistrationCoordinator]:
    """Factory building a coordinator around a store and gateway."""

    def _make(
        repository: Any,
        gateway: Any = None,
        reconciliation: Any = None,
        timeout_seconds: float = 1.0,
        store_retry_attempts: int = 3,
    ) -> RegistrationCoordinator:
        payments = PaymentGatewayAdapter(
            gateway=gateway or ScriptedGateway(),
            timeout_seconds=timeout_seconds,
        )
        return RegistrationCoordinator(
            repository=repository,
            payments=payments,
            reconciliation=reconciliation,
            currency="GHS",
            store_retry_attempts=store_retry_attempts,
            store_retry_backoff_seconds=0,
            sleep=lambda _: None,
        )

    return _make

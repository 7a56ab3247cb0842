"""
Integration tests for the registration flow.

Tests the full registration flow through the API with a real database and
the sandbox gateway.
Requires PostgreSQL to be running (via docker-compose).
"""

import logging
from collections.abc import Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool

from src.adapters.gateway.sandbox import SandboxPaymentGateway
from src.adapters.reconciliation.console import ConsoleReconciliationLog
from src.adapters.repository.postgres import PostgresRegistrationRepository
from src.api.dependencies import get_registration_coordinator
from src.api.main import app
from src.domain.payments import PaymentGatewayAdapter
from src.domain.registration import RegistrationCoordinator
from tests.database import insert_event

pytestmark = pytest.mark.usefixtures("clean_database")

BODY = {"name": "Ama Mensah", "email": "AMA@Example.COM", "phone": "+233201234567"}


@pytest.fixture
def client(pool: ConnectionPool) -> Generator[TestClient, None, None]:
    """Create test client with real database connection."""
    # Override the app's pool with our test pool
    app.state.pool = pool
    insert_event(pool, "evt-free")
    insert_event(pool, "evt-paid", price=Decimal("50.00"))
    insert_event(pool, "evt-draft", is_published=False, status="draft")
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_gateway(pool: ConnectionPool, mode: str) -> None:
    """Route registrations through a sandbox gateway in the given mode."""
    coordinator = RegistrationCoordinator(
        repository=PostgresRegistrationRepository(pool),
        payments=PaymentGatewayAdapter(gateway=SandboxPaymentGateway(mode), timeout_seconds=0.2),
        reconciliation=ConsoleReconciliationLog(),
    )
    app.dependency_overrides[get_registration_coordinator] = lambda: coordinator


def stored_rows(pool: ConnectionPool, event_id: str) -> list[tuple]:
    with pool.connection() as conn, conn.cursor() as cursor:
        cursor.execute(
            """SELECT attendee_email, amount_paid, payment_status, payment_reference, metadata
               FROM event_registrations WHERE event_id = %s""",
            (event_id,),
        )
        return cursor.fetchall()


class TestFreeRegistrationFlow:
    def test_free_registration_persisted(self, client: TestClient, pool: ConnectionPool) -> None:
        response = client.post("/v1/events/evt-free/registrations", json=BODY)

        assert response.status_code == 201
        assert response.json()["transitions"] == ["processing", "succeeded"]
        rows = stored_rows(pool, "evt-free")
        assert len(rows) == 1
        email, amount, payment_status, reference, _ = rows[0]
        assert email == "ama@example.com"
        assert amount == Decimal("0")
        assert payment_status == "completed"
        assert reference is None

    def test_duplicate_returns_409(self, client: TestClient, pool: ConnectionPool) -> None:
        assert client.post("/v1/events/evt-free/registrations", json=BODY).status_code == 201

        response = client.post(
            "/v1/events/evt-free/registrations", json={**BODY, "email": "ama@example.com"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "already_registered"
        assert len(stored_rows(pool, "evt-free")) == 1

    def test_closed_event_rejected(self, client: TestClient, pool: ConnectionPool) -> None:
        response = client.post("/v1/events/evt-draft/registrations", json=BODY)

        assert response.status_code == 409
        assert stored_rows(pool, "evt-draft") == []


class TestPaidRegistrationFlow:
    def test_authorized_payment_persisted_with_reference(
        self, client: TestClient, pool: ConnectionPool
    ) -> None:
        use_gateway(pool, "authorize")

        response = client.post("/v1/events/evt-paid/registrations", json=BODY)

        assert response.status_code == 201
        data = response.json()
        rows = stored_rows(pool, "evt-paid")
        assert len(rows) == 1
        _, amount, payment_status, reference, metadata = rows[0]
        assert amount == Decimal("50.00")
        assert payment_status == "completed"
        assert reference == data["payment_reference"]
        assert metadata["amount_minor"] == 5000
        assert metadata["gateway_response"]["status"] == "success"

    def test_cancelled_payment_writes_nothing(self, client: TestClient, pool: ConnectionPool) -> None:
        use_gateway(pool, "cancel")

        response = client.post("/v1/events/evt-paid/registrations", json=BODY)

        assert response.status_code == 200
        assert response.json()["state"] == "idle"
        assert stored_rows(pool, "evt-paid") == []

    def test_silent_gateway_is_indeterminate(
        self, client: TestClient, pool: ConnectionPool, caplog: pytest.LogCaptureFixture
    ) -> None:
        use_gateway(pool, "silent")

        with caplog.at_level(logging.ERROR):
            response = client.post("/v1/events/evt-paid/registrations", json=BODY)

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "payment_indeterminate"
        assert data["support_required"] is True
        assert stored_rows(pool, "evt-paid") == []
        assert "[RECONCILE] Kind: payment_indeterminate" in caplog.text
        assert data["payment_reference"] in caplog.text


class TestAuditFlow:
    def test_stats_and_check_after_registration(self, client: TestClient, pool: ConnectionPool) -> None:
        use_gateway(pool, "authorize")
        client.post("/v1/events/evt-paid/registrations", json=BODY)

        stats = client.get("/v1/events/evt-paid/registrations/stats").json()
        check = client.get(
            "/v1/events/evt-paid/registrations/check", params={"email": "AMA@example.com"}
        ).json()

        assert stats["confirmed"] == 1
        assert Decimal(stats["revenue"]) == Decimal("50.00")
        assert check["is_registered"] is True

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "ok"
        assert data["currency"] == "GHS"

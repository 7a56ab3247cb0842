"""
Unit tests for the /health endpoint.

The store pool is mocked; the lifespan is not run.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.main import app


@pytest.fixture
def pool() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(pool: MagicMock) -> TestClient:
    app.state.pool = pool
    return TestClient(app)


class TestHealth:
    def test_reports_store_and_configuration(self, client: TestClient, pool: MagicMock) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "ok"
        assert data["currency"] == "GHS"
        assert data["gateway_mode"] == "authorize"

    def test_probes_registrations_table(self, client: TestClient, pool: MagicMock) -> None:
        client.get("/health")

        conn = pool.connection.return_value.__enter__.return_value
        conn.execute.assert_called_once_with("SELECT 1 FROM event_registrations LIMIT 1")

    def test_store_failure_propagates(self, pool: MagicMock) -> None:
        pool.connection.side_effect = RuntimeError("pool closed")
        app.state.pool = pool

        response = TestClient(app, raise_server_exceptions=False).get("/health")

        assert response.status_code == 500

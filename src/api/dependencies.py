"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from functools import lru_cache

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.gateway.sandbox import SandboxPaymentGateway
from src.adapters.reconciliation.console import ConsoleReconciliationLog
from src.adapters.repository.postgres import PostgresEventCatalog, PostgresRegistrationRepository
from src.config.settings import get_settings
from src.domain.payments import PaymentGatewayAdapter
from src.domain.registration import RegistrationCoordinator

# Module-level singleton - ConsoleReconciliationLog is stateless
_reconciliation_log = ConsoleReconciliationLog()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresRegistrationRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresRegistrationRepository(pool)


def get_event_catalog(request: Request) -> PostgresEventCatalog:
    """Create event catalog with connection pool from app state."""
    return PostgresEventCatalog(get_pool(request))


@lru_cache
def get_payment_gateway() -> SandboxPaymentGateway:
    """Get the configured sandbox gateway (singleton)."""
    settings = get_settings()
    return SandboxPaymentGateway(
        mode=settings.gateway_mode,
        delay_seconds=settings.gateway_delay_seconds,
    )


def get_reconciliation_log() -> ConsoleReconciliationLog:
    """Get console reconciliation log (singleton)."""
    return _reconciliation_log


def get_registration_coordinator(request: Request) -> RegistrationCoordinator:
    """
    Create registration coordinator with injected dependencies.

    Wires together the repository, gateway adapter and reconciliation log.
    """
    settings = get_settings()
    payments = PaymentGatewayAdapter(
        gateway=get_payment_gateway(),
        timeout_seconds=settings.payment_timeout_seconds,
        reference_prefix=settings.reference_prefix,
    )
    return RegistrationCoordinator(
        repository=get_repository(request),
        payments=payments,
        reconciliation=get_reconciliation_log(),
        currency=settings.currency,
        store_retry_attempts=settings.store_retry_attempts,
        store_retry_backoff_seconds=settings.store_retry_backoff_seconds,
    )

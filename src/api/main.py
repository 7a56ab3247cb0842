"""
eventpass application - registration API with payment reconciliation.

Startup opens the registration store pool, applies migrations and resolves
the configured payment gateway so a bad gateway mode fails the boot rather
than the first paid checkout.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.api.dependencies import get_payment_gateway
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "Register attendees for free and paid events, and audit "
        "registrations per event",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the registration store and check the gateway configuration."""
    settings = get_settings()

    logger.info(
        "Opening registration store pool (min=%d, max=%d)",
        settings.pool_min_size,
        settings.pool_max_size,
    )
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    run_migrations(pool)
    app.state.pool = pool

    gateway = get_payment_gateway()
    logger.info(
        "eventpass ready: currency=%s gateway=%s checkout timeout=%ss store retries=%d",
        settings.currency,
        gateway.mode,
        settings.payment_timeout_seconds,
        settings.store_retry_attempts,
    )

    yield

    pool.close()
    logger.info("Registration store pool closed")


app = FastAPI(
    title="eventpass",
    description="Event Registration API - Registration and payment reconciliation core",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Liveness plus a registration store probe.

    Reads the registrations table, so a pool that connects but has not been
    migrated reports unhealthy. Raises if the store is unreachable.
    """
    settings = get_settings()
    with request.app.state.pool.connection() as conn:
        conn.execute("SELECT 1 FROM event_registrations LIMIT 1")

    return {
        "status": "healthy",
        "store": "ok",
        "currency": settings.currency,
        "gateway_mode": get_payment_gateway().mode,
    }

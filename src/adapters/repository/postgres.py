"""
PostgreSQL repository adapter - Implements RegistrationRepository and EventCatalog.

This module provides the PostgreSQL implementation of the domain's
persistence ports using psycopg3 with raw SQL.

Consistency Design:
-------------------
The coordinator's duplicate guard is check-then-create and can race. The
real guarantee lives here:

1. **uq_event_registrations_confirmed_attendee**: partial unique index on
   (event_id, attendee_email) WHERE status = 'confirmed'. Two concurrent
   INSERTs for the same attendee serialize on the index; the loser gets
   UniqueViolation, translated to Conflict.

2. **uq_event_registrations_payment_reference**: partial unique index on
   payment_reference, so a gateway reference is recorded at most once.

3. **CHECK constraints**: a completed payment requires either
   amount_paid = 0 or a payment_reference.

Driver errors are translated at this boundary:
- psycopg.errors.UniqueViolation -> Conflict
- psycopg.OperationalError, psycopg.InterfaceError, psycopg_pool.PoolTimeout
  -> StoreUnavailable
- any other psycopg.Error -> StoreError
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool, PoolTimeout

from src.domain.exceptions import Conflict, StoreError, StoreUnavailable
from src.domain.models import Event, Registration, RegistrationDraft, RegistrationStats
from src.domain.ports import PaymentStatus, RegistrationStatus, TicketType

logger = logging.getLogger(__name__)

_REGISTRATION_COLUMNS = """
    id, event_id, attendee_email, attendee_name, attendee_phone,
    registration_date, payment_status, payment_reference, ticket_type,
    amount_paid, currency, status, check_in_time, metadata,
    created_at, updated_at
"""


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate psycopg errors into the domain's store errors."""
    try:
        yield
    except psycopg.errors.UniqueViolation as e:
        raise Conflict(f"{operation}: {e.diag.constraint_name or 'unique violation'}") from e
    except (PoolTimeout, psycopg.OperationalError, psycopg.InterfaceError) as e:
        logger.warning("Store unavailable during %s: %s", operation, e)
        raise StoreUnavailable(f"{operation}: {e}") from e
    except psycopg.Error as e:
        logger.error("Store error during %s: %s", operation, e)
        raise StoreError(f"{operation}: {e}") from e


def _row_to_registration(row: dict[str, Any]) -> Registration:
    return Registration(
        id=str(row["id"]),
        event_id=row["event_id"],
        attendee_email=row["attendee_email"],
        attendee_name=row["attendee_name"],
        attendee_phone=row["attendee_phone"],
        registration_date=row["registration_date"],
        payment_status=PaymentStatus(row["payment_status"]),
        payment_reference=row["payment_reference"],
        ticket_type=TicketType(row["ticket_type"]) if row["ticket_type"] else None,
        amount_paid=Decimal(row["amount_paid"]),
        currency=row["currency"],
        status=RegistrationStatus(row["status"]),
        check_in_time=row["check_in_time"],
        metadata=row["metadata"] or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresRegistrationRepository:
    """
    Implements RegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_confirmed(self, event_id: str, email: str) -> Registration | None:
        """
        Look up the confirmed registration for an event and attendee.

        Reads through the primary, so every committed write is visible.

        Args:
            event_id: Event identifier
            email: Normalized email address

        Returns:
            Confirmed Registration or None
        """
        sql = f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM event_registrations
            WHERE event_id = %s AND attendee_email = %s AND status = %s
        """

        with _store_errors("find_confirmed"), self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (event_id, email, RegistrationStatus.CONFIRMED.value))
                row = cursor.fetchone()

        return _row_to_registration(row) if row is not None else None

    def create(self, draft: RegistrationDraft) -> Registration:
        """
        Insert a registration row.

        The partial unique index on (event_id, attendee_email) for confirmed
        rows turns a concurrent duplicate into UniqueViolation, which is
        raised as Conflict.

        Raises:
            Conflict: Duplicate confirmed attendee or payment reference
            StoreUnavailable: Connection or pool failure
            StoreError: Any other driver failure
        """
        sql = f"""
            INSERT INTO event_registrations (
                event_id, attendee_email, attendee_name, attendee_phone,
                payment_status, payment_reference, ticket_type,
                amount_paid, currency, status, metadata
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_REGISTRATION_COLUMNS}
        """
        params = (
            draft.event_id,
            draft.attendee_email,
            draft.attendee_name,
            draft.attendee_phone,
            draft.payment_status.value,
            draft.payment_reference,
            draft.ticket_type.value,
            draft.amount_paid,
            draft.currency,
            draft.status.value,
            Jsonb(draft.metadata),
        )

        with _store_errors("create"), self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
            conn.commit()

        return _row_to_registration(row)

    def count_confirmed(self, event_id: str) -> int:
        """Count confirmed registrations for display."""
        sql = """
            SELECT COUNT(*) FROM event_registrations
            WHERE event_id = %s AND status = %s
        """

        with _store_errors("count_confirmed"), self._pool.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(sql, (event_id, RegistrationStatus.CONFIRMED.value))
                row = cursor.fetchone()

        return int(row[0]) if row else 0

    def list_for_event(self, event_id: str) -> list[Registration]:
        """All registrations for an event, newest first."""
        sql = f"""
            SELECT {_REGISTRATION_COLUMNS}
            FROM event_registrations
            WHERE event_id = %s
            ORDER BY registration_date DESC, created_at DESC
        """

        with _store_errors("list_for_event"), self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (event_id,))
                rows = cursor.fetchall()

        return [_row_to_registration(row) for row in rows]

    def stats_for_event(self, event_id: str) -> RegistrationStats:
        """Totals per status plus revenue from completed payments."""
        sql = """
            SELECT
                COUNT(*) AS total,
                COUNT(*) FILTER (WHERE status = 'confirmed') AS confirmed,
                COUNT(*) FILTER (WHERE payment_status = 'pending') AS pending,
                COUNT(*) FILTER (WHERE status = 'cancelled') AS cancelled,
                COUNT(*) FILTER (WHERE check_in_time IS NOT NULL) AS checked_in,
                COALESCE(SUM(amount_paid) FILTER (WHERE payment_status = 'completed'), 0) AS revenue
            FROM event_registrations
            WHERE event_id = %s
        """

        with _store_errors("stats_for_event"), self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (event_id,))
                row = cursor.fetchone()

        return RegistrationStats(
            total=row["total"],
            confirmed=row["confirmed"],
            pending=row["pending"],
            cancelled=row["cancelled"],
            checked_in=row["checked_in"],
            revenue=Decimal(row["revenue"]),
        )


class PostgresEventCatalog:
    """Implements EventCatalog protocol over the events table."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get_event(self, event_id: str) -> Event | None:
        sql = """
            SELECT id, title, price, currency, is_published, status, max_attendees
            FROM events
            WHERE id = %s
        """

        with _store_errors("get_event"), self._pool.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (event_id,))
                row = cursor.fetchone()

        if row is None:
            return None
        return Event(
            id=row["id"],
            title=row["title"],
            price=Decimal(row["price"]),
            currency=row["currency"],
            is_published=row["is_published"],
            status=row["status"],
            max_attendees=row["max_attendees"],
        )


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

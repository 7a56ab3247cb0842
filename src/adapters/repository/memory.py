"""
In-memory repository adapter - Implements RegistrationRepository and EventCatalog.

Process-local store honouring the same contract as the PostgreSQL
adapter: a single lock serializes uniqueness checks and inserts, so
concurrent creates for the same confirmed attendee yield exactly one
row and Conflict for the rest. Used for unit tests and local demos.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from src.domain.exceptions import Conflict
from src.domain.models import Event, Registration, RegistrationDraft, RegistrationStats
from src.domain.ports import PaymentStatus, RegistrationStatus


class InMemoryRegistrationRepository:
    """
    Implements RegistrationRepository protocol with a dict and a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, Registration] = {}

    def find_confirmed(self, event_id: str, email: str) -> Registration | None:
        with self._lock:
            return self._find_confirmed_locked(event_id, email)

    def _find_confirmed_locked(self, event_id: str, email: str) -> Registration | None:
        for row in self._rows.values():
            if (
                row.event_id == event_id
                and row.attendee_email == email
                and row.status == RegistrationStatus.CONFIRMED
            ):
                return row
        return None

    def create(self, draft: RegistrationDraft) -> Registration:
        with self._lock:
            if draft.status == RegistrationStatus.CONFIRMED and self._find_confirmed_locked(
                draft.event_id, draft.attendee_email
            ):
                raise Conflict(f"confirmed registration exists for {draft.attendee_email}")
            if draft.payment_reference and any(
                row.payment_reference == draft.payment_reference for row in self._rows.values()
            ):
                raise Conflict(f"payment reference already recorded: {draft.payment_reference}")

            now = datetime.now(timezone.utc)
            registration = Registration(
                id=str(uuid.uuid4()),
                event_id=draft.event_id,
                attendee_email=draft.attendee_email,
                attendee_name=draft.attendee_name,
                attendee_phone=draft.attendee_phone,
                amount_paid=draft.amount_paid,
                currency=draft.currency,
                payment_status=draft.payment_status,
                status=draft.status,
                ticket_type=draft.ticket_type,
                payment_reference=draft.payment_reference,
                metadata=dict(draft.metadata),
                registration_date=now,
                created_at=now,
                updated_at=now,
            )
            self._rows[registration.id] = registration
            return registration

    def count_confirmed(self, event_id: str) -> int:
        with self._lock:
            return sum(
                1
                for row in self._rows.values()
                if row.event_id == event_id and row.status == RegistrationStatus.CONFIRMED
            )

    def list_for_event(self, event_id: str) -> list[Registration]:
        with self._lock:
            rows = [row for row in self._rows.values() if row.event_id == event_id]
        return sorted(rows, key=lambda row: row.registration_date, reverse=True)

    def stats_for_event(self, event_id: str) -> RegistrationStats:
        rows = self.list_for_event(event_id)
        return RegistrationStats(
            total=len(rows),
            confirmed=sum(1 for r in rows if r.status == RegistrationStatus.CONFIRMED),
            pending=sum(1 for r in rows if r.payment_status == PaymentStatus.PENDING),
            cancelled=sum(1 for r in rows if r.status == RegistrationStatus.CANCELLED),
            checked_in=sum(1 for r in rows if r.check_in_time is not None),
            revenue=sum(
                (r.amount_paid for r in rows if r.payment_status == PaymentStatus.COMPLETED),
                Decimal("0"),
            ),
        )

    def check_in(self, registration_id: str) -> Registration:
        """Stamp check_in_time; stands in for the external check-in operation."""
        with self._lock:
            row = self._rows[registration_id]
            now = datetime.now(timezone.utc)
            updated = replace(row, check_in_time=now, updated_at=now)
            self._rows[registration_id] = updated
            return updated


class InMemoryEventCatalog:
    """Implements EventCatalog protocol over a dict of events."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self._events = {event.id: event for event in events or []}

    def add(self, event: Event) -> None:
        self._events[event.id] = event

    def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

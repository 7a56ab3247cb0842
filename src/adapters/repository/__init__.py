"""Repository adapters - Database implementations."""

from .memory import InMemoryEventCatalog, InMemoryRegistrationRepository
from .postgres import PostgresEventCatalog, PostgresRegistrationRepository, run_migrations

__all__ = [
    "InMemoryEventCatalog",
    "InMemoryRegistrationRepository",
    "PostgresEventCatalog",
    "PostgresRegistrationRepository",
    "run_migrations",
]

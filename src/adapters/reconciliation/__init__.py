"""Reconciliation adapters - Sinks for payments needing manual review."""

from .console import ConsoleReconciliationLog

__all__ = ["ConsoleReconciliationLog"]

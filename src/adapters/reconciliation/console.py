"""
Console reconciliation adapter - Implements ReconciliationLog protocol.

This module provides a logging-based implementation of the domain's
reconciliation port. Payments that ended without a clean outcome are
written at ERROR level so that support can match them against the
gateway dashboard.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConsoleReconciliationLog:
    """
    Implements ReconciliationLog protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Deliberately independent of the registration store, which may be
    the very thing that failed.
    """

    def record(
        self,
        kind: str,
        reference: str,
        event_id: str,
        email: str,
        amount: object,
        details: dict[str, Any],
    ) -> None:
        """
        Log a reconciliation case.

        Args:
            kind: Error kind (payment_indeterminate or paid_but_unrecorded)
            reference: Payment attempt reference
            event_id: Event the attendee tried to register for
            email: Normalized attendee email
            amount: Amount in major units
            details: Gateway response and failure cause
        """
        logger.error(
            "[RECONCILE] Kind: %s Reference: %s Event: %s Email: %s Amount: %s Details: %s",
            kind,
            reference,
            event_id,
            email,
            amount,
            json.dumps(details, default=str, sort_keys=True),
        )

"""Event recording for tracked user actions (e.g. kpi_click, subscription_upgrade).

Decoupled from assignment and exposure: route handlers call the recorder
explicitly when the action happens, which may be in a later request than
the one that logged the exposure.
"""
import time
from typing import Mapping, Optional

from splitlab.middleware.logging import get_logger
from splitlab.schemas.records import EventRecord
from splitlab.services.log_store import ExperimentLogStore, ExperimentStoreError

logger = get_logger()


class InvalidEventError(ValueError):
    """Raised when an event name is missing or not a non-empty string."""
    pass


def resolve_variant(
    test_id: Optional[str],
    variant: Optional[str],
    variants: Mapping[str, str]
) -> Optional[str]:
    """Explicit variant, else the visitor's assignment for test_id, else None."""
    if not test_id:
        return None
    return variant or variants.get(test_id) or None


class EventRecorder:
    """Appends event records; storage failures are logged, not raised."""

    def __init__(self, store: ExperimentLogStore):
        self.store = store

    def log_event(
        self,
        visitor_id: Optional[str],
        event_name,
        variants: Optional[Mapping[str, str]] = None,
        test_id: Optional[str] = None,
        variant: Optional[str] = None
    ) -> Optional[EventRecord]:
        """
        Record a user action, attributed to an experiment when test_id is given.

        Args:
            visitor_id: Visitor id from assignment; "anon_<ms>" when missing
            event_name: Name of the action, e.g. "kpi_click"
            variants: The visitor's current assignments, used when variant is omitted
            test_id: Experiment the event belongs to (optional)
            variant: Explicit variant (optional)

        Returns:
            The stored record, or None if storage failed

        Raises:
            InvalidEventError: If event_name is not a non-empty string
        """
        if not isinstance(event_name, str) or not event_name:
            raise InvalidEventError('Missing or invalid "event" in body')

        record = EventRecord(
            user_or_session_id=visitor_id or f"anon_{int(time.time() * 1000)}",
            event_name=event_name,
            test_id=test_id or None,
            variant=resolve_variant(test_id, variant, variants or {})
        )

        try:
            self.store.append_event(record)
        except ExperimentStoreError as e:
            logger.warning(
                "event_log_failed",
                visitor_id=record.user_or_session_id,
                event_name=event_name,
                error=str(e)
            )
            return None

        logger.info(
            "event_logged",
            visitor_id=record.user_or_session_id,
            event_name=event_name,
            test_id=record.test_id,
            variant=record.variant
        )
        return record

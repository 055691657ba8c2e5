"""
Fault Log

Fault event ingestion and acknowledgment on top of an EventStore:
- Ingestion from the gateway
- System audit events (e.g., reset requested)
- Listing, counting, acknowledging and deleting for dashboard users

No retries: a failed store call surfaces immediately as PersistenceError.
"""

from datetime import datetime
from typing import Callable
from uuid import uuid4

from ..common.exceptions import NotFoundError
from ..common.logging_setup import get_service_logger, log_fault_event
from ..models import FaultEvent
from .device_state import utc_now
from .event_store import EventStore

logger = get_service_logger("fault_log")

DEFAULT_LIST_LIMIT = 50
DEFAULT_SEVERITY = "medium"


class FaultLog:
    """Fault event lifecycle: ingest -> list -> acknowledge / delete"""

    def __init__(self, store: EventStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self._clock = clock

    def _new_event(self, event_type: str, message: str, severity: str) -> FaultEvent:
        return FaultEvent(
            id=str(uuid4()),
            type=event_type,
            message=message,
            severity=severity,
            timestamp=self._clock(),
            acknowledged=False,
        )

    def ingest(
        self,
        event_type: str,
        message: str,
        severity: str = DEFAULT_SEVERITY,
    ) -> FaultEvent:
        """Record a fault event reported by the gateway."""
        event = self.store.append(self._new_event(event_type, message, severity))
        log_fault_event(logger, event.id, event.severity, event.type, event.message)
        return event

    def record_system_event(
        self,
        event_type: str,
        message: str,
        severity: str = "low",
    ) -> FaultEvent:
        """Record an event generated by the relay itself (audit trail)."""
        event = self.store.append(self._new_event(event_type, message, severity))
        logger.info(
            f"System event recorded: {event_type}",
            extra={"event_id": event.id, "event_type": event_type},
        )
        return event

    def list_events(self, limit: int = DEFAULT_LIST_LIMIT) -> list[FaultEvent]:
        """Most recent events, newest first."""
        return self.store.recent(limit)

    def count_unacknowledged(self) -> int:
        return self.store.count_unacknowledged()

    def acknowledge(self, event_id: str) -> FaultEvent:
        """
        Acknowledge one event.

        Raises:
            NotFoundError: If no event has this id
        """
        event = self.store.acknowledge(event_id)
        if event is None:
            raise NotFoundError(f"Alarm {event_id} not found", resource_id=event_id)
        logger.info(f"Alarm {event_id} acknowledged", extra={"event_id": event_id})
        return event

    def acknowledge_all(self) -> int:
        """
        Acknowledge every unacknowledged event in one bulk store call.

        Events ingested while the bulk update runs may or may not be included.
        """
        count = self.store.acknowledge_all()
        logger.info(f"Acknowledged {count} alarms", extra={"count": count})
        return count

    def delete(self, event_id: str) -> None:
        """Delete one event. Unknown ids are not an error."""
        deleted = self.store.delete(event_id)
        if deleted:
            logger.info(f"Alarm {event_id} deleted", extra={"event_id": event_id})
        else:
            logger.debug(f"Delete of unknown alarm {event_id} ignored")

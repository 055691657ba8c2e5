"""
Fault Event Store

Durable, ordered collection of fault events.

Two backends:
- SupabaseEventStore: `fault_events` table in Supabase (PostgreSQL)
- InMemoryEventStore: process-local list, used when no database is
  configured and in tests

Every backend failure is raised as PersistenceError with the operation name.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from ..common.exceptions import PersistenceError
from ..common.logging_setup import get_service_logger
from ..models import FaultEvent
from .supabase import SupabaseService

logger = get_service_logger("event_store")


class EventStore(ABC):
    """Append / query / update / delete contract used by the fault log"""

    name: str = "abstract"

    @abstractmethod
    def append(self, event: FaultEvent) -> FaultEvent:
        """Durably append one event."""

    @abstractmethod
    def recent(self, limit: int) -> list[FaultEvent]:
        """Most recent events, newest first."""

    @abstractmethod
    def count_unacknowledged(self) -> int:
        """Number of events with acknowledged=false."""

    @abstractmethod
    def acknowledge(self, event_id: str) -> Optional[FaultEvent]:
        """Set acknowledged=true on one event. None if it does not exist."""

    @abstractmethod
    def acknowledge_all(self) -> int:
        """Bulk-acknowledge every unacknowledged event. Returns the count."""

    @abstractmethod
    def delete(self, event_id: str) -> bool:
        """Remove one event. Returns False if it did not exist."""

    def is_connected(self) -> bool:
        return True


# ============================================
# IN-MEMORY BACKEND
# ============================================

class InMemoryEventStore(EventStore):
    """Process-local store. Contents are lost on restart."""

    name = "memory"

    def __init__(self):
        self._events: list[FaultEvent] = []
        self._lock = threading.Lock()

    def append(self, event: FaultEvent) -> FaultEvent:
        with self._lock:
            self._events.append(event.model_copy())
        return event

    def recent(self, limit: int) -> list[FaultEvent]:
        with self._lock:
            # Reverse first so later inserts win timestamp ties
            ordered = sorted(
                reversed(self._events),
                key=lambda e: e.timestamp,
                reverse=True,
            )
            return [e.model_copy() for e in ordered[:limit]]

    def count_unacknowledged(self) -> int:
        with self._lock:
            return sum(1 for e in self._events if not e.acknowledged)

    def acknowledge(self, event_id: str) -> Optional[FaultEvent]:
        with self._lock:
            for event in self._events:
                if event.id == event_id:
                    event.acknowledged = True
                    return event.model_copy()
        return None

    def acknowledge_all(self) -> int:
        count = 0
        with self._lock:
            for event in self._events:
                if not event.acknowledged:
                    event.acknowledged = True
                    count += 1
        return count

    def delete(self, event_id: str) -> bool:
        with self._lock:
            before = len(self._events)
            self._events = [e for e in self._events if e.id != event_id]
            return len(self._events) != before


# ============================================
# SUPABASE BACKEND
# ============================================

def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
        return True
    except ValueError:
        return False


def row_to_fault_event(row: dict) -> FaultEvent:
    """Convert a database row to FaultEvent."""
    return FaultEvent(
        id=str(row["id"]),
        type=row.get("type") or "",
        message=row.get("message") or "",
        severity=row.get("severity") or "",
        timestamp=row["timestamp"],
        acknowledged=row.get("acknowledged", False),
    )


class SupabaseEventStore(EventStore):
    """Fault events in a Supabase table."""

    name = "supabase"

    def __init__(self, service: SupabaseService):
        self._service = service

    def _table(self):
        return self._service.client.table(self._service.table_name)

    def _execute(self, operation: str, build) -> Any:
        """Run a query, converting any backend failure to PersistenceError."""
        try:
            return build(self._table()).execute()
        except Exception as e:
            logger.error(
                f"Event store {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise PersistenceError(str(e), operation=operation) from e

    def append(self, event: FaultEvent) -> FaultEvent:
        result = self._execute("append", lambda t: t.insert(event.to_row()))
        if not result.data:
            raise PersistenceError("insert returned no rows", operation="append")
        return row_to_fault_event(result.data[0])

    def recent(self, limit: int) -> list[FaultEvent]:
        result = self._execute(
            "recent",
            lambda t: t.select("*").order("timestamp", desc=True).limit(limit),
        )
        return [row_to_fault_event(row) for row in result.data or []]

    def count_unacknowledged(self) -> int:
        result = self._execute(
            "count",
            lambda t: t.select("id", count="exact").eq("acknowledged", False).limit(1),
        )
        return result.count or 0

    def acknowledge(self, event_id: str) -> Optional[FaultEvent]:
        # Malformed ids cannot exist in a uuid column
        if not _is_uuid(event_id):
            return None
        result = self._execute(
            "acknowledge",
            lambda t: t.update({"acknowledged": True}).eq("id", event_id),
        )
        if not result.data:
            return None
        return row_to_fault_event(result.data[0])

    def acknowledge_all(self) -> int:
        result = self._execute(
            "acknowledge_all",
            lambda t: t.update({"acknowledged": True}).eq("acknowledged", False),
        )
        return len(result.data) if result.data else 0

    def delete(self, event_id: str) -> bool:
        if not _is_uuid(event_id):
            return False
        result = self._execute("delete", lambda t: t.delete().eq("id", event_id))
        return bool(result.data)

    def is_connected(self) -> bool:
        return self._service.is_connected()

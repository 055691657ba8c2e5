from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from grinder_relay.common.exceptions import PersistenceError
from grinder_relay.models import FaultEvent
from grinder_relay.services.event_store import InMemoryEventStore, SupabaseEventStore


def _event(message: str = "jam detected", acknowledged: bool = False) -> FaultEvent:
    return FaultEvent(
        id=str(uuid4()),
        type="jam",
        message=message,
        severity="high",
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        acknowledged=acknowledged,
    )


class _FakeQuery:
    """Chainable stand-in for a postgrest query builder."""

    def __init__(self, table: "_FakeTable", op: str, arg=None) -> None:  # type: ignore[no-untyped-def]
        self.table = table
        self.calls: list[tuple] = [(op, arg)]

    def __getattr__(self, name: str):  # type: ignore[no-untyped-def]
        def _chain(*args, **kwargs):  # type: ignore[no-untyped-def]
            self.calls.append((name, args, kwargs))
            return self
        return _chain

    def execute(self):  # type: ignore[no-untyped-def]
        self.table.executed.append(self.calls)
        if self.table.error is not None:
            raise self.table.error
        return SimpleNamespace(data=self.table.data, count=self.table.count)


class _FakeTable:
    def __init__(
        self,
        data: list[dict] | None = None,
        error: Exception | None = None,
        count: int | None = None,
    ) -> None:
        self.data = data if data is not None else []
        self.error = error
        self.count = count
        self.executed: list[list[tuple]] = []

    def insert(self, row):  # type: ignore[no-untyped-def]
        return _FakeQuery(self, "insert", row)

    def select(self, columns, count=None):  # type: ignore[no-untyped-def]
        return _FakeQuery(self, "select", (columns, count))

    def update(self, values):  # type: ignore[no-untyped-def]
        return _FakeQuery(self, "update", values)

    def delete(self):  # type: ignore[no-untyped-def]
        return _FakeQuery(self, "delete")


class _FakeService:
    table_name = "fault_events"

    def __init__(self, table: _FakeTable) -> None:
        self._table = table
        self.client = SimpleNamespace(table=lambda name: self._table)

    def is_connected(self) -> bool:
        return self._table.error is None


def test_in_memory_acknowledge_returns_copy() -> None:
    store = InMemoryEventStore()
    event = store.append(_event())

    acked = store.acknowledge(event.id)
    acked.message = "changed"

    assert store.recent(1)[0].message == "jam detected"
    assert store.recent(1)[0].acknowledged is True


def test_in_memory_delete_reports_whether_removed() -> None:
    store = InMemoryEventStore()
    event = store.append(_event())

    assert store.delete(event.id) is True
    assert store.delete(event.id) is False


def test_supabase_append_inserts_row() -> None:
    event = _event()
    table = _FakeTable(data=[event.to_row()])
    store = SupabaseEventStore(_FakeService(table))

    stored = store.append(event)

    assert stored == event
    op, row = table.executed[0][0]
    assert op == "insert"
    assert row["acknowledged"] is False
    assert row["type"] == "jam"


def test_supabase_recent_orders_newest_first_with_limit() -> None:
    table = _FakeTable(data=[_event().to_row()])
    store = SupabaseEventStore(_FakeService(table))

    events = store.recent(50)

    assert len(events) == 1
    calls = table.executed[0]
    assert ("order", ("timestamp",), {"desc": True}) in calls
    assert ("limit", (50,), {}) in calls


def test_supabase_count_unacknowledged_uses_exact_count() -> None:
    # Server returns one row but reports the full match count
    table = _FakeTable(data=[{"id": "a"}], count=1500)
    store = SupabaseEventStore(_FakeService(table))

    assert store.count_unacknowledged() == 1500
    calls = table.executed[0]
    assert calls[0] == ("select", ("id", "exact"))
    assert ("eq", ("acknowledged", False), {}) in calls


def test_supabase_count_unacknowledged_none_is_zero() -> None:
    store = SupabaseEventStore(_FakeService(_FakeTable(data=[], count=None)))

    assert store.count_unacknowledged() == 0


def test_supabase_acknowledge_missing_returns_none() -> None:
    store = SupabaseEventStore(_FakeService(_FakeTable(data=[])))

    assert store.acknowledge(str(uuid4())) is None


def test_supabase_malformed_id_skips_query() -> None:
    table = _FakeTable(data=[])
    store = SupabaseEventStore(_FakeService(table))

    assert store.acknowledge("not-a-uuid") is None
    assert store.delete("not-a-uuid") is False
    assert table.executed == []


def test_supabase_acknowledge_all_counts_updated_rows() -> None:
    rows = [_event(message=f"e{i}", acknowledged=True).to_row() for i in range(3)]
    table = _FakeTable(data=rows)
    store = SupabaseEventStore(_FakeService(table))

    assert store.acknowledge_all() == 3
    op, values = table.executed[0][0]
    assert op == "update"
    assert values == {"acknowledged": True}


def test_supabase_failure_wrapped_as_persistence_error() -> None:
    table = _FakeTable(error=RuntimeError("connection refused"))
    store = SupabaseEventStore(_FakeService(table))

    with pytest.raises(PersistenceError) as excinfo:
        store.append(_event())

    assert excinfo.value.operation == "append"
    assert "connection refused" in excinfo.value.message
    assert store.is_connected() is False


def test_supabase_empty_insert_is_persistence_error() -> None:
    store = SupabaseEventStore(_FakeService(_FakeTable(data=[])))

    with pytest.raises(PersistenceError):
        store.append(_event())

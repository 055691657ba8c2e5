from __future__ import annotations

import pytest
from conftest import FailingEventStore, FakeClock

from grinder_relay.common.exceptions import NotFoundError, PersistenceError
from grinder_relay.services.event_store import InMemoryEventStore
from grinder_relay.services.fault_log import FaultLog


def _fault_log(clock: FakeClock | None = None) -> FaultLog:
    return FaultLog(InMemoryEventStore(), clock=clock or FakeClock())


def test_ingest_creates_unacknowledged_event() -> None:
    clock = FakeClock()
    fault_log = _fault_log(clock)

    event = fault_log.ingest("jam", "jam detected", "high")

    assert event.type == "jam"
    assert event.message == "jam detected"
    assert event.severity == "high"
    assert event.timestamp == clock.now
    assert event.acknowledged is False
    assert fault_log.count_unacknowledged() == 1


def test_ingest_failure_raises_persistence_error() -> None:
    fault_log = FaultLog(FailingEventStore(), clock=FakeClock())

    with pytest.raises(PersistenceError):
        fault_log.ingest("jam", "jam detected", "high")


def test_list_is_newest_first_and_limited() -> None:
    clock = FakeClock()
    fault_log = _fault_log(clock)
    for i in range(5):
        fault_log.ingest("level", f"event {i}", "low")
        clock.advance(1)

    events = fault_log.list_events(limit=3)

    assert [e.message for e in events] == ["event 4", "event 3", "event 2"]


def test_list_orders_same_timestamp_by_insertion() -> None:
    fault_log = _fault_log()
    fault_log.ingest("a", "first", "low")
    fault_log.ingest("b", "second", "low")

    assert [e.message for e in fault_log.list_events()] == ["second", "first"]


def test_acknowledge_one() -> None:
    fault_log = _fault_log()
    first = fault_log.ingest("jam", "one", "high")
    fault_log.ingest("jam", "two", "high")

    acked = fault_log.acknowledge(first.id)

    assert acked.id == first.id
    assert acked.acknowledged is True
    assert fault_log.count_unacknowledged() == 1


def test_acknowledge_unknown_id_raises_not_found() -> None:
    fault_log = _fault_log()

    with pytest.raises(NotFoundError) as excinfo:
        fault_log.acknowledge("does-not-exist")

    assert excinfo.value.status_code == 404
    assert excinfo.value.resource_id == "does-not-exist"


def test_acknowledge_all_then_count_is_zero() -> None:
    fault_log = _fault_log()
    for i in range(4):
        fault_log.ingest("jam", f"event {i}", "high")
    fault_log.acknowledge(fault_log.list_events()[0].id)

    count = fault_log.acknowledge_all()

    assert count == 3
    assert fault_log.count_unacknowledged() == 0


def test_delete_removes_event() -> None:
    fault_log = _fault_log()
    event = fault_log.ingest("jam", "jam detected", "high")

    fault_log.delete(event.id)

    assert fault_log.list_events() == []


def test_delete_unknown_id_is_idempotent() -> None:
    fault_log = _fault_log()
    fault_log.ingest("jam", "jam detected", "high")

    fault_log.delete("does-not-exist")
    fault_log.delete("does-not-exist")

    assert len(fault_log.list_events()) == 1

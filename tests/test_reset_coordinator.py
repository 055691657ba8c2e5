from __future__ import annotations

import pytest
from conftest import FailingEventStore, FakeClock

from grinder_relay.common.exceptions import PersistenceError
from grinder_relay.services.event_store import InMemoryEventStore
from grinder_relay.services.fault_log import FaultLog
from grinder_relay.services.reset_coordinator import ResetCoordinator


def _coordinator(clock: FakeClock, store: InMemoryEventStore | None = None) -> ResetCoordinator:
    fault_log = FaultLog(store if store is not None else InMemoryEventStore(), clock=clock)
    return ResetCoordinator(fault_log, clock=clock)


def test_initial_slot_is_inactive() -> None:
    pending = _coordinator(FakeClock()).peek()

    assert pending.active is False
    assert pending.timestamp is None


def test_request_sets_active_with_request_time() -> None:
    clock = FakeClock()
    coordinator = _coordinator(clock)

    pending = coordinator.request_reset()

    assert pending.active is True
    assert pending.timestamp == clock.now
    assert coordinator.peek() == pending


def test_second_request_overwrites_first() -> None:
    clock = FakeClock()
    coordinator = _coordinator(clock)

    coordinator.request_reset()
    clock.advance(3)
    second = coordinator.request_reset()

    peeked = coordinator.peek()
    assert peeked.active is True
    assert peeked.timestamp == second.timestamp == clock.now


def test_peek_does_not_clear() -> None:
    coordinator = _coordinator(FakeClock())
    coordinator.request_reset()

    coordinator.peek()
    coordinator.peek()

    assert coordinator.peek().active is True


def test_consume_returns_pending_and_clears_slot() -> None:
    clock = FakeClock()
    coordinator = _coordinator(clock)
    coordinator.request_reset()

    consumed = coordinator.consume()

    assert consumed.active is True
    assert consumed.timestamp == clock.now
    after = coordinator.peek()
    assert after.active is False
    assert after.timestamp is None


def test_consume_inactive_slot_is_not_an_error() -> None:
    consumed = _coordinator(FakeClock()).consume()

    assert consumed.active is False


def test_request_records_system_reset_audit_event() -> None:
    store = InMemoryEventStore()
    coordinator = _coordinator(FakeClock(), store)

    coordinator.request_reset()

    events = store.recent(10)
    assert len(events) == 1
    assert events[0].type == "System Reset"
    assert events[0].message == "Grinder system reset requested"
    assert events[0].severity == "low"
    assert events[0].acknowledged is False


def test_audit_failure_surfaces_but_reset_stays_active() -> None:
    coordinator = _coordinator(FakeClock(), FailingEventStore())

    with pytest.raises(PersistenceError):
        coordinator.request_reset()

    assert coordinator.peek().active is True

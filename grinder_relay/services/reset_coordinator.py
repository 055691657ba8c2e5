"""
Reset Coordinator

Single-slot reset handshake between dashboard users and the gateway.

Flow:
1. User requests a reset -> slot becomes {active: true, timestamp: now}
2. Gateway polls the slot (read-only peek)
3. Gateway consumes the slot after acting on it -> {active: false}

At most one reset is outstanding: a new request overwrites an unconsumed
one (last request wins, no queue).
"""

import threading
from datetime import datetime
from typing import Callable

from ..common.logging_setup import get_service_logger
from ..models import (
    PendingReset,
    SYSTEM_RESET_MESSAGE,
    SYSTEM_RESET_SEVERITY,
    SYSTEM_RESET_TYPE,
)
from .device_state import utc_now
from .fault_log import FaultLog

logger = get_service_logger("reset")


class ResetCoordinator:
    """Owns the pending reset slot."""

    def __init__(self, fault_log: FaultLog, clock: Callable[[], datetime] = utc_now):
        self._fault_log = fault_log
        self._clock = clock
        self._lock = threading.Lock()
        self._pending = PendingReset()

    def request_reset(self) -> PendingReset:
        """
        Queue a reset for the gateway and record the audit event.

        The slot is set before the audit append. If the append fails the
        reset stays active and the PersistenceError propagates to the caller.

        Returns:
            The new pending record
        """
        pending = PendingReset(active=True, timestamp=self._clock())
        with self._lock:
            replaced = self._pending.active
            self._pending = pending

        if replaced:
            logger.info("Unconsumed reset request overwritten")
        logger.info(
            "Reset requested",
            extra={"requested_at": pending.timestamp.isoformat()},
        )

        self._fault_log.record_system_event(
            SYSTEM_RESET_TYPE,
            SYSTEM_RESET_MESSAGE,
            SYSTEM_RESET_SEVERITY,
        )
        return pending.model_copy()

    def peek(self) -> PendingReset:
        """Current pending record, unchanged."""
        with self._lock:
            return self._pending.model_copy()

    def consume(self) -> PendingReset:
        """
        Clear the slot and return what was in it.

        Consuming an inactive slot returns the inactive record.
        """
        with self._lock:
            consumed = self._pending
            self._pending = PendingReset()

        if consumed.active:
            logger.info(
                "Reset consumed by gateway",
                extra={"requested_at": consumed.timestamp.isoformat()},
            )
        return consumed

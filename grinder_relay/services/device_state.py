"""
Device State Cache

Holds the most recent gateway snapshot and the time it was received.

Liveness is derived at read time: the gateway counts as connected while
the last push is younger than the liveness window. There is no background
timer; staleness always matches the reader's clock.
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models import DEFAULT_SNAPSHOT, Snapshot

# Gateway is considered disconnected after this long without a push
LIVENESS_WINDOW_SECONDS = 15.0

# Keys owned by the cache; gateway values for these are discarded
SERVER_KEYS = ("timestamp", "connected", "gatewayConnected")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DeviceStateCache:
    """
    Single-snapshot cache.

    Each push replaces the snapshot wholesale (no field merge) and restamps
    it with the server receipt time. Reads return a copy with `connected`
    recomputed against the liveness window.
    """

    def __init__(
        self,
        liveness_window_seconds: float = LIVENESS_WINDOW_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.liveness_window_seconds = liveness_window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Snapshot = dict(DEFAULT_SNAPSHOT)
        self._received_at: Optional[datetime] = None

    @property
    def has_data(self) -> bool:
        with self._lock:
            return self._received_at is not None

    def push(self, snapshot: Snapshot) -> datetime:
        """
        Replace the cached snapshot.

        Args:
            snapshot: Arbitrary mapping of field name to scalar value

        Returns:
            Server receipt time stamped on the snapshot
        """
        received_at = self._clock()
        fields = {k: v for k, v in snapshot.items() if k not in SERVER_KEYS}
        with self._lock:
            self._snapshot = fields
            self._received_at = received_at
        return received_at

    def read(self) -> dict:
        """Cached snapshot plus `timestamp`, `connected` and `gatewayConnected`."""
        now = self._clock()
        with self._lock:
            snapshot = dict(self._snapshot)
            received_at = self._received_at

        connected = self._is_live(received_at, now)
        snapshot["timestamp"] = received_at.isoformat() if received_at else None
        snapshot["connected"] = connected
        snapshot["gatewayConnected"] = connected
        return snapshot

    def is_connected(self) -> bool:
        with self._lock:
            received_at = self._received_at
        return self._is_live(received_at, self._clock())

    def last_seen_age(self) -> Optional[float]:
        """Seconds since the last push, or None if never pushed."""
        with self._lock:
            received_at = self._received_at
        if received_at is None:
            return None
        return (self._clock() - received_at).total_seconds()

    def _is_live(self, received_at: Optional[datetime], now: datetime) -> bool:
        if received_at is None:
            return False
        return (now - received_at).total_seconds() < self.liveness_window_seconds

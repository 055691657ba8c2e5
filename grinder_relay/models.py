"""
Relay Data Model

Shared types for the state cache, the reset coordinator and the fault log.
Wire names follow what the gateway and dashboard already speak
(`type` and `timestamp` on fault events, `timestamp` on pending resets).
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


# Snapshot values are scalars only; unknown keys are kept as-is
SnapshotValue = Union[bool, int, float, str, None]
Snapshot = dict[str, SnapshotValue]

# Zero-value snapshot served before the gateway has ever pushed
DEFAULT_SNAPSHOT: Snapshot = {
    "forward": False,
    "reverse": False,
    "jam": False,
    "LOWLEVEL": False,
    "autoMode": False,
    "manualMode": False,
    "lastReset": None,
}

# Audit event recorded for every user reset request
SYSTEM_RESET_TYPE = "System Reset"
SYSTEM_RESET_MESSAGE = "Grinder system reset requested"
SYSTEM_RESET_SEVERITY = "low"


class FaultEvent(BaseModel):
    """Durable, acknowledgeable record of an abnormal condition."""
    id: str
    type: str
    message: str
    severity: str
    timestamp: datetime
    acknowledged: bool = False

    def to_row(self) -> dict[str, Any]:
        """Row representation for the event store."""
        return {
            "id": self.id,
            "type": self.type,
            "message": self.message,
            "severity": self.severity,
            "timestamp": self.timestamp.isoformat(),
            "acknowledged": self.acknowledged,
        }


class PendingReset(BaseModel):
    """Single outstanding reset request."""
    active: bool = False
    timestamp: Optional[datetime] = Field(None, description="When the reset was requested")

    def to_response(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

"""
Gateway Router

Routes called by the grinder gateway (shared-secret bearer token):
- State push (replaces the cached snapshot)
- Fault event ingestion
- Reset poll and consume
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..common.logging_setup import get_service_logger
from ..dependencies.auth import GatewayPrincipal, require_gateway
from ..dependencies.services import get_device_state, get_fault_log, get_reset_coordinator
from ..models import Snapshot
from ..services.device_state import DeviceStateCache
from ..services.fault_log import DEFAULT_SEVERITY, FaultLog
from ..services.reset_coordinator import ResetCoordinator

router = APIRouter()

logger = get_service_logger("gateway")


# ============================================
# SCHEMAS
# ============================================

class AlarmCreate(BaseModel):
    """Fault event reported by the gateway."""
    type: str = Field(..., min_length=1, description="Fault category, e.g. 'jam'")
    message: str = Field(..., description="Human readable description")
    severity: str = Field(DEFAULT_SEVERITY, min_length=1, description="e.g. low, medium, high")


# ============================================
# ENDPOINTS - INGEST
# ============================================

@router.post("/gateway/state")
async def push_state(
    snapshot: Snapshot,
    gateway: GatewayPrincipal = Depends(require_gateway),
    device_state: DeviceStateCache = Depends(get_device_state),
):
    """
    Replace the cached device snapshot.

    Any JSON object of scalar values is accepted; fields are not merged
    with the previous snapshot.
    """
    received_at = device_state.push(snapshot)
    logger.debug(
        f"Gateway state received ({len(snapshot)} fields)",
        extra={"received_at": received_at.isoformat()},
    )
    return {"success": True}


@router.post("/gateway/alarm")
async def push_alarm(
    alarm: AlarmCreate,
    gateway: GatewayPrincipal = Depends(require_gateway),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """Record a fault event. Returns 500 if the event store write fails."""
    event = fault_log.ingest(alarm.type, alarm.message, alarm.severity)
    return {"success": True, "id": event.id}


# ============================================
# ENDPOINTS - RESET HANDSHAKE
# ============================================

@router.get("/reset-status")
async def get_reset_status(
    gateway: GatewayPrincipal = Depends(require_gateway),
    coordinator: ResetCoordinator = Depends(get_reset_coordinator),
):
    """Peek at the pending reset. Does not clear it."""
    return coordinator.peek().to_response()


@router.post("/reset-status/consume")
async def consume_reset(
    gateway: GatewayPrincipal = Depends(require_gateway),
    coordinator: ResetCoordinator = Depends(get_reset_coordinator),
):
    """
    Clear the pending reset after the gateway has acted on it.

    Returns the record that was consumed (active=false if nothing was pending).
    """
    consumed = coordinator.consume()
    return {"success": True, **consumed.to_response()}

"""
Grinder Router

Dashboard routes for the machine itself:
- Current snapshot with gateway liveness
- Reset request
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from ..config import Settings
from ..dependencies.auth import UserPrincipal, get_current_user
from ..dependencies.services import get_device_state, get_reset_coordinator, get_settings_dep
from ..services.device_state import DeviceStateCache
from ..services.gateway_client import notify_reset
from ..services.reset_coordinator import ResetCoordinator

router = APIRouter()


@router.get("/grinder-data")
async def get_grinder_data(
    user: UserPrincipal = Depends(get_current_user),
    device_state: DeviceStateCache = Depends(get_device_state),
):
    """
    Latest snapshot pushed by the gateway.

    `connected` (and `gatewayConnected`) is true while the last push is
    younger than the liveness window.
    """
    return device_state.read()


@router.post("/reset")
async def request_reset(
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(get_current_user),
    coordinator: ResetCoordinator = Depends(get_reset_coordinator),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Queue a reset for the gateway and log it as a "System Reset" alarm.

    The gateway picks it up on its next /api/reset-status poll. If
    GATEWAY_URL is set, the gateway is also notified right away.
    """
    pending = coordinator.request_reset()

    if settings.gateway_url:
        # Runs after the response is sent
        background_tasks.add_task(
            notify_reset,
            settings.gateway_url,
            settings.gateway_token,
            pending,
        )

    return {
        "success": True,
        "message": "Reset queued. Gateway will process shortly.",
        "timestamp": pending.to_response()["timestamp"],
    }

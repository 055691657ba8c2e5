"""
Alarms Router

Dashboard access to fault events:
- List (newest first)
- Unacknowledged count (badge)
- Acknowledge one / all
- Delete
"""

from fastapi import APIRouter, Depends, Query

from ..dependencies.auth import UserPrincipal, get_current_user
from ..dependencies.services import get_fault_log
from ..models import FaultEvent
from ..services.fault_log import DEFAULT_LIST_LIMIT, FaultLog

router = APIRouter()


# ============================================
# ENDPOINTS - QUERIES
# ============================================

@router.get("", response_model=list[FaultEvent])
async def list_alarms(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=500),
    user: UserPrincipal = Depends(get_current_user),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """
    List the most recent alarms.

    Sorted by timestamp descending (newest first), at most `limit` (default 50).
    """
    return fault_log.list_events(limit)


@router.get("/count")
async def get_unacknowledged_count(
    user: UserPrincipal = Depends(get_current_user),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """
    Get count of unacknowledged alarms.

    Useful for dashboard badge display.
    """
    return {"count": fault_log.count_unacknowledged()}


# ============================================
# ENDPOINTS - ACKNOWLEDGMENT
# ============================================

@router.post("/acknowledge-all")
async def acknowledge_all_alarms(
    user: UserPrincipal = Depends(get_current_user),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """Acknowledge every unacknowledged alarm."""
    count = fault_log.acknowledge_all()
    return {
        "success": True,
        "message": "All alarms acknowledged",
        "count": count,
    }


@router.patch("/{alarm_id}", response_model=FaultEvent)
async def acknowledge_alarm(
    alarm_id: str,
    user: UserPrincipal = Depends(get_current_user),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """
    Acknowledge one alarm.

    Returns the updated alarm, or 404 if it does not exist.
    """
    return fault_log.acknowledge(alarm_id)


@router.delete("/{alarm_id}")
async def delete_alarm(
    alarm_id: str,
    user: UserPrincipal = Depends(get_current_user),
    fault_log: FaultLog = Depends(get_fault_log),
):
    """Delete one alarm. Deleting an unknown id also succeeds."""
    fault_log.delete(alarm_id)
    return {"success": True}

"""
Gateway Wake-up Client

Optional push to the gateway when a reset is queued, so it does not have
to wait for its next poll. Best-effort only: the poll on /api/reset-status
stays authoritative and failures here never reach the user.
"""

import httpx

from ..common.logging_setup import get_service_logger
from ..models import PendingReset

logger = get_service_logger("gateway_client")


async def notify_reset(gateway_url: str, gateway_token: str, pending: PendingReset) -> dict:
    """
    POST the pending reset to {gateway_url}/api/reset.

    Returns:
        dict with "status" on success, or "error" on failure
    """
    if not gateway_url:
        return {"error": "GATEWAY_URL not configured"}

    url = f"{gateway_url.rstrip('/')}/api/reset"
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {gateway_token}"},
                json=pending.to_response(),
                timeout=5.0,
            )
            response.raise_for_status()
            logger.info(f"Gateway notified of reset at {url}")
            return {"status": response.status_code}
    except httpx.HTTPStatusError as e:
        error_detail = f"{e.response.status_code}: {e.response.text}"
        logger.warning(f"Gateway rejected reset notification: {error_detail}")
        return {"error": error_detail}
    except httpx.HTTPError as e:
        error_detail = f"Connection error: {e}"
        logger.warning(f"Gateway reset notification failed: {error_detail}")
        return {"error": error_detail}

"""
Authentication Dependencies

Two independent trust domains gate every relay route:
- Users: signed, time-limited bearer token issued by /api/login
- Gateway: one static shared-secret bearer token

Usage:
    from grinder_relay.dependencies.auth import get_current_user, require_gateway

    @router.get("/")
    async def dashboard_route(user: UserPrincipal = Depends(get_current_user)):
        pass

    @router.post("/state")
    async def gateway_route(gateway: GatewayPrincipal = Depends(require_gateway)):
        pass
"""

import hmac
from typing import Literal, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from ..common.exceptions import ForbiddenError, UnauthorizedError
from ..common.logging_setup import get_service_logger, token_fingerprint
from ..config import Settings
from ..services.tokens import ADMIN_ROLE, TokenSigner
from .services import get_settings_dep, get_token_signer

logger = get_service_logger("auth")

# Security scheme for bearer tokens
# auto_error=False so missing headers reach our own 401 response
security = HTTPBearer(auto_error=False)


# ============================================
# PRINCIPALS
# ============================================

class UserPrincipal(BaseModel):
    """Authenticated dashboard user. Single tier: every user is admin."""
    kind: Literal["user"] = "user"
    username: str
    role: str = ADMIN_ROLE


class GatewayPrincipal(BaseModel):
    """The authenticated gateway."""
    kind: Literal["gateway"] = "gateway"
    fingerprint: str


# ============================================
# USER GATE
# ============================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    signer: TokenSigner = Depends(get_token_signer),
) -> UserPrincipal:
    """
    Validate the user token and return the user.

    Raises:
        UnauthorizedError 401: No token, or invalid / expired token
        ConfigurationError 500: JWT_SECRET not set
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing token")

    payload = signer.verify(credentials.credentials)
    return UserPrincipal(
        username=payload["sub"],
        role=payload.get("role", ADMIN_ROLE),
    )


# ============================================
# GATEWAY GATE
# ============================================

def is_gateway_token(candidate: str, expected: str) -> bool:
    """Constant-time comparison. An unset expected token matches nothing."""
    if not expected or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


async def require_gateway(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings_dep),
) -> GatewayPrincipal:
    """
    Validate the gateway shared secret.

    Raises:
        UnauthorizedError 401: No bearer token
        ForbiddenError 403: Token does not match GATEWAY_TOKEN
    """
    if credentials is None or not credentials.credentials:
        logger.info("Gateway auth failed: no bearer token")
        raise UnauthorizedError("Unauthorized")

    candidate = credentials.credentials
    fingerprint = token_fingerprint(candidate)

    if not settings.gateway_token:
        logger.warning("Gateway auth rejected: GATEWAY_TOKEN not configured")
        raise ForbiddenError("Forbidden")

    if not is_gateway_token(candidate, settings.gateway_token):
        logger.warning(
            "Gateway auth failed: token mismatch",
            extra={"token_fingerprint": fingerprint},
        )
        raise ForbiddenError("Forbidden")

    logger.debug("Gateway auth successful", extra={"token_fingerprint": fingerprint})
    return GatewayPrincipal(fingerprint=fingerprint)

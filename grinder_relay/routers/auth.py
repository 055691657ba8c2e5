"""
Authentication Router

Dashboard login against the single configured admin account.
Issues the bearer token required by every user route.
"""

import hmac

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..common.exceptions import ConfigurationError, UnauthorizedError
from ..common.logging_setup import get_service_logger
from ..config import Settings
from ..dependencies.auth import UserPrincipal, get_current_user
from ..dependencies.services import get_settings_dep, get_token_signer
from ..services.tokens import ADMIN_ROLE, TokenSigner

router = APIRouter()

logger = get_service_logger("auth")


# ============================================
# SCHEMAS
# ============================================

class LoginRequest(BaseModel):
    """Login request body."""
    username: str
    password: str


class LoginUser(BaseModel):
    username: str
    role: str


class LoginResponse(BaseModel):
    """Login response with token."""
    success: bool = True
    message: str = "Login successful"
    token: str
    user: LoginUser


def _matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


# ============================================
# ENDPOINTS
# ============================================

@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    settings: Settings = Depends(get_settings_dep),
    signer: TokenSigner = Depends(get_token_signer),
):
    """
    Log in with the admin username and password.

    Returns a bearer token valid for TOKEN_TTL_HOURS (default 8 hours).
    """
    if not settings.user_auth_configured:
        logger.error("Login attempted but ADMIN_USER/ADMIN_PASS/JWT_SECRET missing")
        raise ConfigurationError("Server auth not configured (check .env)")

    user_ok = _matches(credentials.username, settings.admin_user)
    pass_ok = _matches(credentials.password, settings.admin_pass)
    if not (user_ok and pass_ok):
        logger.warning(f"Failed login for {credentials.username!r}")
        raise UnauthorizedError("Invalid credentials")

    token = signer.issue(credentials.username, ADMIN_ROLE)
    logger.info(f"User {credentials.username} logged in")

    return LoginResponse(
        token=token,
        user=LoginUser(username=credentials.username, role=ADMIN_ROLE),
    )


@router.get("/me", response_model=LoginUser)
async def get_me(user: UserPrincipal = Depends(get_current_user)):
    """Identity behind the presented token."""
    return LoginUser(username=user.username, role=user.role)

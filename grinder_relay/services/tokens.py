"""
User Access Tokens

Signed, time-limited bearer tokens for dashboard users.

Format: base64url(json payload) "." base64url(HMAC-SHA256(secret, payload))
Payload: {"sub": username, "role": "admin", "iat": epoch, "exp": epoch}
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Callable, Optional

from ..common.exceptions import ConfigurationError, UnauthorizedError

TOKEN_TTL_HOURS = 8.0
ADMIN_ROLE = "admin"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(secret: str, message: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()
    return _b64encode(digest)


class TokenSigner:
    """Issues and verifies user tokens with a shared server secret."""

    def __init__(
        self,
        secret: str,
        ttl_hours: float = TOKEN_TTL_HOURS,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self.ttl_seconds = int(ttl_hours * 3600)
        self._clock = clock

    def _require_secret(self) -> str:
        if not self._secret:
            raise ConfigurationError("Server auth not configured (check .env)")
        return self._secret

    def issue(self, username: str, role: str = ADMIN_ROLE) -> str:
        secret = self._require_secret()
        issued_at = int(self._clock())
        payload = {
            "sub": username,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        body = _b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
        return f"{body}.{_sign(secret, body.encode('ascii'))}"

    def verify(self, token: Optional[str]) -> dict[str, Any]:
        """
        Verify signature and expiry.

        Returns:
            Decoded payload

        Raises:
            UnauthorizedError: Malformed, tampered or expired token
            ConfigurationError: No signing secret configured
        """
        secret = self._require_secret()
        if not token or token.count(".") != 1:
            raise UnauthorizedError("Invalid/expired token")

        body, signature = token.split(".")
        expected = _sign(secret, body.encode("ascii", errors="replace"))
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            raise UnauthorizedError("Invalid/expired token")

        try:
            payload = json.loads(_b64decode(body))
        except ValueError:
            raise UnauthorizedError("Invalid/expired token")

        if not isinstance(payload, dict) or not payload.get("sub"):
            raise UnauthorizedError("Invalid/expired token")

        expires_at = payload.get("exp")
        if not isinstance(expires_at, (int, float)) or self._clock() >= expires_at:
            raise UnauthorizedError("Invalid/expired token")

        return payload

"""
Relay Settings

Application settings loaded from environment variables (or a .env file).

Create a .env file with:
- JWT_SECRET=long-random-string
- ADMIN_USER=admin
- ADMIN_PASS=change-me
- GATEWAY_TOKEN=shared-gateway-secret
- SUPABASE_URL=https://xxx.supabase.co         (optional)
- SUPABASE_SERVICE_KEY=your-service-role-key   (optional)
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Relay configuration. Field names map to upper-case env vars."""

    # Server
    host: str = "0.0.0.0"
    port: int = 3500
    environment: str = "development"
    # Comma-separated list; empty means allow any origin
    allowed_origins: str = ""

    # Event store (Supabase). Empty -> in-memory store
    supabase_url: str = ""
    supabase_service_key: str = ""
    fault_events_table: str = "fault_events"

    # User credentials
    jwt_secret: str = ""
    admin_user: str = ""
    admin_pass: str = ""
    token_ttl_hours: float = 8.0

    # Gateway
    gateway_token: str = ""
    # Empty disables the reset wake-up push
    gateway_url: str = ""
    liveness_window_seconds: float = 15.0

    # Logging
    relay_log_level: str = "INFO"
    relay_log_format: str = "json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def origins(self) -> list[str]:
        """Parsed CORS origins."""
        origins = [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]
        return origins or ["*"]

    @property
    def log_json(self) -> bool:
        return self.relay_log_format.lower() == "json"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def user_auth_configured(self) -> bool:
        return bool(self.admin_user and self.admin_pass and self.jwt_secret)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()

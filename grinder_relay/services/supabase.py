"""
Supabase Service

Handles the connection to Supabase (PostgreSQL) used as the durable
fault event store. The client is created lazily on first use so the
relay can start while the database is still unreachable.
"""

from typing import Optional

from supabase import create_client, Client

from ..common.exceptions import ConfigurationError
from ..config import Settings


class SupabaseService:
    """
    Supabase client wrapper.

    Provides the client and a connectivity probe.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[Client] = None

    @property
    def table_name(self) -> str:
        return self._settings.fault_events_table

    @property
    def client(self) -> Client:
        """Get or create Supabase client."""
        if self._client is None:
            if not self._settings.supabase_configured:
                raise ConfigurationError(
                    "Supabase credentials not configured. "
                    "Set SUPABASE_URL and SUPABASE_SERVICE_KEY in .env file."
                )
            self._client = create_client(
                self._settings.supabase_url,
                self._settings.supabase_service_key
            )
        return self._client

    def is_connected(self) -> bool:
        """Check if Supabase connection is working."""
        try:
            # Simple query to test connection
            self.client.table(self.table_name).select("id").limit(1).execute()
            return True
        except Exception:
            return False

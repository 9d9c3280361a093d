"""
Database handle for Supabase.

The handle is created explicitly, opened once by the application lifespan and
closed on shutdown. Repositories receive the client from the handle instead
of reaching for a module-level singleton.
"""

import logging
from typing import Optional

from supabase import create_client, Client

from .config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the service-role Supabase client for the lifetime of the app.

    Usage:
        with Database(settings) as db:
            repo = SupabasePrincipalRepository(db.client)
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client: Optional[Client] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Client:
        """The open client. Raises if the handle has not been opened."""
        if self._client is None:
            raise RuntimeError("Database handle is not open. Call open() first.")
        return self._client

    def open(self) -> Client:
        """
        Create the service-role client.

        Returns:
            Supabase client configured with the service role key

        Raises:
            RuntimeError: If Supabase configuration is missing
        """
        if self._client is not None:
            return self._client

        if not self._settings.supabase_url or not self._settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set GATEHOUSE_SUPABASE_URL and GATEHOUSE_SUPABASE_SERVICE_ROLE_KEY environment variables."
            )

        self._client = create_client(
            self._settings.supabase_url,
            self._settings.supabase_service_role_key,
        )
        logger.info("Supabase client opened for %s", self._settings.supabase_url)
        return self._client

    def close(self) -> None:
        """Release the client. Safe to call more than once."""
        if self._client is None:
            return
        self._client = None
        logger.info("Supabase client released")

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

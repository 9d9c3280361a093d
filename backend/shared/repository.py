"""
Base repository class for database access.

Wraps the Supabase client and the small row-handling helpers every
table-backed repository needs.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for Supabase-backed repositories.

    Subclasses implement the domain queries and map rows to Pydantic models.

    Example:
        class PrincipalRepository(BaseRepository[PrincipalRecord]):
            def get(self, table: str, row_id: str) -> Optional[PrincipalRecord]:
                row = self._first(self._db.table(table).select("*").eq("id", row_id).execute())
                return self._map_row(row) if row else None
    """

    def __init__(self, db: Client) -> None:
        """
        Args:
            db: Open Supabase client (see shared.database.Database).
        """
        self._db = db

    @staticmethod
    def _first(result: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a query result, or None when empty."""
        rows = getattr(result, "data", None) or []
        return rows[0] if rows else None

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

"""
Principal repository for Supabase.

Encapsulates all queries and row mapping for the principal tables:
- users
- admins

Both tables share the schema in migrations/001_principals.sql.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.models import PrincipalKind
from shared.repository import BaseRepository

from .exceptions import DuplicatePrincipalError, PrincipalNotFoundError
from .models import PrincipalPage, PrincipalRecord, PrincipalStatus
from .policy import clamp_pagination, ensure_unique, filter_update, normalize_email

logger = logging.getLogger(__name__)

TABLES = {
    PrincipalKind.USER: "users",
    PrincipalKind.ADMIN: "admins",
}

UNIQUE_VIOLATION = "23505"

# Characters with meaning inside a PostgREST or=(...) filter or an ilike pattern
_FILTER_UNSAFE = str.maketrans("", "", ",()*%\\")


def _ilike_term(search: Optional[str]) -> str:
    """Strip filter syntax and escape `_` so it matches a literal underscore."""
    if not search:
        return ""
    return search.translate(_FILTER_UNSAFE).strip().replace("_", "\\_")


class SupabasePrincipalRepository(BaseRepository[PrincipalRecord]):
    """
    IPrincipalStore implementation over Supabase.

    Note: This repository does NOT perform authorization checks.
    The gate and the services are responsible for that.
    """

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def find_by_email(self, kind: PrincipalKind, email: str) -> Optional[PrincipalRecord]:
        return self._find_one(kind, "email", normalize_email(email))

    async def find_by_id(self, kind: PrincipalKind, principal_id: str) -> Optional[PrincipalRecord]:
        return self._find_one(kind, "id", str(principal_id))

    async def find_by_username(self, kind: PrincipalKind, username: str) -> Optional[PrincipalRecord]:
        return self._find_one(kind, "username", str(username).strip())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, kind: PrincipalKind, fields: dict[str, Any]) -> PrincipalRecord:
        data = dict(fields)
        data["email"] = normalize_email(data["email"])
        data["username"] = str(data["username"]).strip()

        await ensure_unique(self, kind, email=data["email"], username=data["username"])

        try:
            result = self._db.table(TABLES[kind]).insert(_to_row(data)).execute()
        except APIError as e:
            raise self._translate(e)

        return self._map_row(kind, result.data[0])

    async def update(self, kind: PrincipalKind, principal_id: str, fields: dict[str, Any]) -> PrincipalRecord:
        current = await self.find_by_id(kind, principal_id)
        if current is None:
            raise PrincipalNotFoundError(kind.value, str(principal_id))

        update = filter_update(kind, fields)
        if not update:
            return current

        await ensure_unique(
            self,
            kind,
            email=update["email"] if update.get("email", current.email) != current.email else None,
            username=update["username"] if update.get("username", current.username) != current.username else None,
            exclude_id=current.id,
        )

        row = _to_row(update)
        row["updated_at"] = self._now_iso()
        return self._write(kind, current.id, row)

    async def save(self, record: PrincipalRecord) -> PrincipalRecord:
        row = record.model_dump(mode="json", exclude={"id", "kind", "created_at"})
        row["updated_at"] = self._now_iso()
        return self._write(record.kind, record.id, row)

    async def delete(self, kind: PrincipalKind, principal_id: str) -> None:
        result = self._db.table(TABLES[kind]).delete().eq("id", str(principal_id)).execute()
        if not result.data:
            raise PrincipalNotFoundError(kind.value, str(principal_id))

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    async def list(
        self,
        kind: PrincipalKind,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[PrincipalStatus] = None,
    ) -> PrincipalPage:
        page, page_size = clamp_pagination(page, page_size)
        offset = (page - 1) * page_size
        term = _ilike_term(search)

        def filtered(query):
            if term:
                query = query.or_(f"username.ilike.*{term}*,email.ilike.*{term}*")
            if status is not None:
                query = query.eq("status", PrincipalStatus(status).value)
            return query

        table = TABLES[kind]
        count_result = filtered(self._db.table(table).select("id", count="exact")).execute()
        total = count_result.count or 0

        result = (
            filtered(self._db.table(table).select("*"))
            .order("created_at", desc=True)
            .range(offset, offset + page_size - 1)
            .execute()
        )

        return PrincipalPage(
            items=[self._map_row(kind, row) for row in result.data],
            total=total,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _find_one(self, kind: PrincipalKind, column: str, value: str) -> Optional[PrincipalRecord]:
        result = self._db.table(TABLES[kind]).select("*").eq(column, value).limit(1).execute()
        row = self._first(result)
        return self._map_row(kind, row) if row else None

    def _write(self, kind: PrincipalKind, principal_id: str, row: dict[str, Any]) -> PrincipalRecord:
        try:
            result = self._db.table(TABLES[kind]).update(row).eq("id", principal_id).execute()
        except APIError as e:
            raise self._translate(e)

        stored = self._first(result)
        if stored is None:
            raise PrincipalNotFoundError(kind.value, principal_id)
        return self._map_row(kind, stored)

    @staticmethod
    def _translate(error: APIError) -> Exception:
        """Map a unique-index violation to DuplicatePrincipalError; keep the rest."""
        if error.code == UNIQUE_VIOLATION:
            message = str(error.message or "")
            field = "username" if "username" in message else "email"
            return DuplicatePrincipalError(field)
        logger.error("Supabase write failed: %s", error.message)
        return error

    @staticmethod
    def _map_row(kind: PrincipalKind, row: dict[str, Any]) -> PrincipalRecord:
        data = {k: v for k, v in row.items() if v is not None}
        data["kind"] = kind
        return PrincipalRecord.model_validate(data)


def _to_row(fields: dict[str, Any]) -> dict[str, Any]:
    """JSON-ready column values for an insert or update."""
    row: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        row[key] = value
    return row

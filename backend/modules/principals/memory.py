"""
In-memory principal store.

Used by the test suite and by local runs with GATEHOUSE_STORE_BACKEND=memory.
Records are copied on the way in and out, so callers never share state with
the store and every write replaces one record as a whole.
"""

import itertools
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from shared.models import PrincipalKind

from .exceptions import PrincipalNotFoundError
from .models import PrincipalPage, PrincipalRecord, PrincipalStatus
from .policy import clamp_pagination, ensure_unique, filter_update, normalize_email


class InMemoryPrincipalStore:
    """IPrincipalStore backed by one dict per principal kind."""

    def __init__(self) -> None:
        self._records: dict[PrincipalKind, dict[str, PrincipalRecord]] = {
            kind: {} for kind in PrincipalKind
        }
        # Insertion order breaks ties between identical created_at values
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()

    async def find_by_email(self, kind: PrincipalKind, email: str) -> Optional[PrincipalRecord]:
        wanted = normalize_email(email)
        return self._find(kind, lambda r: r.email == wanted)

    async def find_by_id(self, kind: PrincipalKind, principal_id: str) -> Optional[PrincipalRecord]:
        record = self._records[kind].get(str(principal_id))
        return record.model_copy(deep=True) if record else None

    async def find_by_username(self, kind: PrincipalKind, username: str) -> Optional[PrincipalRecord]:
        wanted = str(username).strip()
        return self._find(kind, lambda r: r.username == wanted)

    async def create(self, kind: PrincipalKind, fields: dict[str, Any]) -> PrincipalRecord:
        data = dict(fields)
        data["email"] = normalize_email(data["email"])
        data["username"] = str(data["username"]).strip()

        await ensure_unique(self, kind, email=data["email"], username=data["username"])

        now = datetime.now(timezone.utc)
        record = PrincipalRecord(
            **{**data, "id": str(uuid.uuid4()), "kind": kind, "created_at": now, "updated_at": now}
        )
        self._records[kind][record.id] = record
        self._sequence[record.id] = next(self._counter)
        return record.model_copy(deep=True)

    async def update(self, kind: PrincipalKind, principal_id: str, fields: dict[str, Any]) -> PrincipalRecord:
        current = self._records[kind].get(str(principal_id))
        if current is None:
            raise PrincipalNotFoundError(kind.value, str(principal_id))

        update = filter_update(kind, fields)
        if not update:
            return current.model_copy(deep=True)

        await ensure_unique(
            self,
            kind,
            email=update["email"] if update.get("email", current.email) != current.email else None,
            username=update["username"] if update.get("username", current.username) != current.username else None,
            exclude_id=current.id,
        )

        updated = PrincipalRecord.model_validate(
            {**current.model_dump(), **update, "updated_at": datetime.now(timezone.utc)}
        )
        self._records[kind][updated.id] = updated
        return updated.model_copy(deep=True)

    async def save(self, record: PrincipalRecord) -> PrincipalRecord:
        if record.id not in self._records[record.kind]:
            raise PrincipalNotFoundError(record.kind.value, record.id)

        stored = record.model_copy(deep=True, update={"updated_at": datetime.now(timezone.utc)})
        self._records[record.kind][record.id] = stored
        return stored.model_copy(deep=True)

    async def list(
        self,
        kind: PrincipalKind,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[PrincipalStatus] = None,
    ) -> PrincipalPage:
        page, page_size = clamp_pagination(page, page_size)
        term = search.lower() if search else None

        matches = [
            r
            for r in self._records[kind].values()
            if (term is None or term in r.username.lower() or term in r.email.lower())
            and (status is None or r.status == status)
        ]
        matches.sort(key=lambda r: (r.created_at, self._sequence[r.id]), reverse=True)

        offset = (page - 1) * page_size
        items = [r.model_copy(deep=True) for r in matches[offset : offset + page_size]]
        return PrincipalPage(items=items, total=len(matches))

    async def delete(self, kind: PrincipalKind, principal_id: str) -> None:
        if self._records[kind].pop(str(principal_id), None) is None:
            raise PrincipalNotFoundError(kind.value, str(principal_id))
        self._sequence.pop(str(principal_id), None)

    def _find(self, kind: PrincipalKind, predicate) -> Optional[PrincipalRecord]:
        for record in self._records[kind].values():
            if predicate(record):
                return record.model_copy(deep=True)
        return None

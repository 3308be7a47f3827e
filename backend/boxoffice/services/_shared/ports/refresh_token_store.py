from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from boxoffice.models.base import new_id


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Stored refresh token.

    :ivar id: Record identifier.
    :ivar token: Signed refresh token value (unique).
    :ivar account_id: Owning account.
    :ivar expires_at: Absolute expiration (UTC), equal to the signed ``exp``.
    :ivar created_at: Issuance time (UTC).
    """

    id: str
    token: str
    account_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class RefreshTokenStore(Protocol):
    """
    Persistent refresh token storage, one record per active session.

    Deletes are idempotent: removing something absent is not an error.
    """

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        """Persist a new record. MUST run before the token reaches the client."""

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        """Fetch the record holding ``token`` (exact match)."""

    def delete_by_id(self, token_id: str) -> None:
        """Delete a single record by id."""

    def delete_by_token(self, token: str) -> int:
        """
        Delete every record holding ``token``.

        :returns: Number of records removed (``0`` for unknown tokens).
        """

    def purge_expired(self, now: datetime) -> int:
        """Delete records whose expiry is not after ``now``. :returns: count."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock so concurrent sessions behave like a real store
       in unit tests.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        record = RefreshTokenRecord(
            id=new_id(),
            token=token,
            account_id=account_id,
            expires_at=expires_at,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._by_id[record.id] = record
        return record

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        with self._lock:
            return next((r for r in self._by_id.values() if r.token == token), None)

    def delete_by_id(self, token_id: str) -> None:
        with self._lock:
            self._by_id.pop(token_id, None)

    def delete_by_token(self, token: str) -> int:
        with self._lock:
            ids = [rid for rid, r in self._by_id.items() if r.token == token]
            for rid in ids:
                del self._by_id[rid]
            return len(ids)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            ids = [rid for rid, r in self._by_id.items() if r.is_expired(now)]
            for rid in ids:
                del self._by_id[rid]
            return len(ids)

    def count_for(self, account_id: str) -> int:
        """Test helper: number of live records for an account."""
        with self._lock:
            return sum(1 for r in self._by_id.values() if r.account_id == account_id)

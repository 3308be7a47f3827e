# comments in English; reST docstrings
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import redis  # type: ignore[import-untyped]

from boxoffice.models.base import new_id
from boxoffice.services._shared.ports import RefreshTokenRecord, RefreshTokenStore

# Records outlive their expiry briefly so an expired token is still found,
# cleaned up and reported as expired rather than unknown.
EXPIRY_GRACE = timedelta(hours=1)


def _s(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout
    ------
    - ``rt:tok:<sha256(token)>``: hash with ``id, token, account_id,
      expires_at, created_at`` (epoch seconds).
    - ``rt:id:<id>``: digest of the token held by record ``id``.

    Every key carries a TTL of ``expires_at + EXPIRY_GRACE``.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _digest(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @staticmethod
    def _kt(digest: str) -> str:
        return f"rt:tok:{digest}"

    @staticmethod
    def _ki(token_id: str) -> str:
        return f"rt:id:{token_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    def _load(self, digest: str) -> RefreshTokenRecord | None:
        raw = self.r.hgetall(self._kt(digest))
        if not raw:
            return None
        data = {_s(k): _s(v) for k, v in raw.items()}
        return RefreshTokenRecord(
            id=data["id"],
            token=data["token"],
            account_id=data["account_id"],
            expires_at=datetime.fromtimestamp(int(data["expires_at"]), tz=UTC),
            created_at=datetime.fromtimestamp(int(data["created_at"]), tz=UTC),
        )

    def _drop(self, record: RefreshTokenRecord) -> None:
        pipe = self.r.pipeline(transaction=True)
        pipe.delete(self._kt(self._digest(record.token)))
        pipe.delete(self._ki(record.id))
        pipe.execute()

    # -------------------- API ------------------------

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        now = datetime.now(UTC)
        record = RefreshTokenRecord(
            id=new_id(),
            token=token,
            account_id=account_id,
            expires_at=expires_at,
            created_at=now,
        )
        digest = self._digest(token)
        ttl = max(1, self._to_ts(expires_at + EXPIRY_GRACE) - self._to_ts(now))

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            self._kt(digest),
            mapping={
                "id": record.id,
                "token": token,
                "account_id": account_id,
                "expires_at": str(self._to_ts(expires_at)),
                "created_at": str(self._to_ts(now)),
            },
        )
        pipe.expire(self._kt(digest), ttl)
        pipe.set(self._ki(record.id), digest, ex=ttl)
        pipe.execute()
        return record

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        return self._load(self._digest(token))

    def delete_by_id(self, token_id: str) -> None:
        digest = self.r.get(self._ki(token_id))
        if digest is None:
            return
        record = self._load(_s(digest))
        if record is None:
            self.r.delete(self._ki(token_id))
            return
        self._drop(record)

    def delete_by_token(self, token: str) -> int:
        record = self._load(self._digest(token))
        if record is None:
            return 0
        self._drop(record)
        return 1

    def purge_expired(self, now: datetime) -> int:
        removed = 0
        for key in self.r.scan_iter(match="rt:tok:*"):
            record = self._load(_s(key).removeprefix("rt:tok:"))
            if record is not None and record.is_expired(now):
                self._drop(record)
                removed += 1
        return removed

"""SQLAlchemy adapter for the :class:`RefreshTokenStore` port."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from boxoffice.infra.sqlalchemy.user_store import as_utc
from boxoffice.models.refresh_token import RefreshToken
from boxoffice.services._shared.ports import RefreshTokenRecord, RefreshTokenStore
from boxoffice.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def to_refresh_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        token=row.token,
        account_id=row.account_id,
        expires_at=as_utc(row.expires_at),  # type: ignore[arg-type]
        created_at=as_utc(row.created_at),  # type: ignore[arg-type]
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """Refresh token store over the ``refresh_tokens`` table."""

    def __init__(
        self,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory

    def create(self, *, token: str, account_id: str, expires_at: datetime) -> RefreshTokenRecord:
        with self._uow() as uow:
            row = RefreshToken(
                token=token,
                account_id=account_id,
                expires_at=expires_at,
                created_at=datetime.now(UTC),
            )
            uow.refresh_tokens.add(row)
            record = to_refresh_record(row)
        return record

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        with self._ro_uow() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            return to_refresh_record(row) if row else None

    def delete_by_id(self, token_id: str) -> None:
        with self._uow() as uow:
            uow.refresh_tokens.delete_by_id(token_id)

    def delete_by_token(self, token: str) -> int:
        with self._uow() as uow:
            return uow.refresh_tokens.delete_by_token(token)

    def purge_expired(self, now: datetime) -> int:
        with self._uow() as uow:
            return uow.refresh_tokens.delete_expired(now)

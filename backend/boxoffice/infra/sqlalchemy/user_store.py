"""SQLAlchemy adapter for the :class:`UserStore` port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from boxoffice.models.account import Account
from boxoffice.services._shared.errors import DuplicateAccount, violates
from boxoffice.services._shared.ports import AccountRecord, NewAccount, UserStore
from boxoffice.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    """Label naive timestamps (SQLite drops tzinfo) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def to_account_record(account: Account) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        email=account.email,
        password_hash=account.password_hash,
        first_name=account.first_name,
        last_name=account.last_name,
        role=account.role,
        phone=account.phone,
        email_verified=bool(account.email_verified),
        created_at=as_utc(account.created_at),
        last_login_at=as_utc(account.last_login_at),
    )


class SQLAlchemyUserStore(UserStore):
    """
    Account store over the ``accounts`` table.

    Each call runs in its own Unit of Work: reads in a read-only one, writes
    in a read-write one that commits on success.

    :param uow_factory: Builds read-write units of work.
    :param ro_uow_factory: Builds read-only units of work.
    """

    def __init__(
        self,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory

    def find_by_email(self, email: str) -> AccountRecord | None:
        with self._ro_uow() as uow:
            account = uow.accounts.get_by_email(email)
            return to_account_record(account) if account else None

    def find_by_id(self, account_id: str) -> AccountRecord | None:
        with self._ro_uow() as uow:
            account = uow.accounts.get(account_id)
            return to_account_record(account) if account else None

    def create(self, fields: NewAccount) -> AccountRecord:
        """
        Insert a new account.

        :raises DuplicateAccount: When ``uq_accounts_email`` rejects the row,
            including when a concurrent registration committed first.
        """
        try:
            with self._uow() as uow:
                account = Account(
                    email=fields.email,
                    password_hash=fields.password_hash,
                    first_name=fields.first_name,
                    last_name=fields.last_name,
                    phone=fields.phone,
                    role=fields.role,
                    email_verified=False,
                )
                uow.accounts.add(account)
                record = to_account_record(account)
        except IntegrityError as exc:
            if violates(exc, "uq_accounts_email"):
                log.info("Duplicate account insert rejected by constraint")
                raise DuplicateAccount() from exc
            raise
        return record

    def record_login(self, account_id: str, at: datetime) -> None:
        with self._uow() as uow:
            uow.accounts.set_last_login(account_id, at)

    def delete(self, account_id: str) -> None:
        with self._uow() as uow:
            uow.accounts.delete_by_id(account_id)

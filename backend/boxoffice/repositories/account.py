"""Account repository: lookups and persistence for :class:`Account`."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from boxoffice.models.account import Account
from boxoffice.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It never hashes passwords or issues tokens.
    """

    model = Account

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by exact (case-sensitive) email.

        :param email: Email address as typed by the caller.
        :type email: str
        :returns: Account or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.email == email)
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when an account with this exact email exists."""
        stmt = select(Account.id).where(Account.email == email)
        return self.session.execute(stmt).first() is not None

    def set_last_login(self, account_id: str, at: datetime) -> bool:
        """Stamp ``last_login_at`` with a single UPDATE.

        :returns: ``True`` if a row was updated.
        """
        stmt = update(Account).where(Account.id == account_id).values(last_login_at=at)
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def delete_by_id(self, account_id: str) -> int:
        """Delete an account by id with a single DELETE; returns rows removed."""
        stmt = delete(Account).where(Account.id == account_id)
        return int(self.session.execute(stmt).rowcount or 0)

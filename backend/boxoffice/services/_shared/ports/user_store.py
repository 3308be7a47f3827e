from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from boxoffice.models.account import AccountRole
from boxoffice.models.base import new_id
from boxoffice.services._shared.errors import DuplicateAccount


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """
    Read-model of an account as seen by the session manager.

    :ivar id: Opaque account identifier.
    :ivar email: Login email, exactly as stored.
    :ivar password_hash: bcrypt hash.
    :ivar role: Privilege level.
    :ivar last_login_at: Latest successful login, if any.
    """

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: AccountRole
    phone: str | None = None
    email_verified: bool = False
    created_at: datetime | None = None
    last_login_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class NewAccount:
    """Fields required to create an account. ``password_hash`` is already hashed."""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: AccountRole = AccountRole.USER
    phone: str | None = None


class UserStore(Protocol):
    """
    Persistent account storage.

    ``create`` MUST raise :class:`DuplicateAccount` when the email is taken,
    including when a concurrent insert wins the race. ``delete`` of an unknown
    id is a no-op.
    """

    def find_by_email(self, email: str) -> AccountRecord | None: ...

    def find_by_id(self, account_id: str) -> AccountRecord | None: ...

    def create(self, fields: NewAccount) -> AccountRecord: ...

    def record_login(self, account_id: str, at: datetime) -> None: ...

    def delete(self, account_id: str) -> None: ...


class InMemoryUserStore(UserStore):
    """
    Dict-backed account store for unit tests.

    .. note::
       A threading lock makes the email check and insert atomic, mirroring
       the unique constraint of the relational store.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, AccountRecord] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> AccountRecord | None:
        with self._lock:
            return next((a for a in self._by_id.values() if a.email == email), None)

    def find_by_id(self, account_id: str) -> AccountRecord | None:
        with self._lock:
            return self._by_id.get(account_id)

    def create(self, fields: NewAccount) -> AccountRecord:
        with self._lock:
            if any(a.email == fields.email for a in self._by_id.values()):
                raise DuplicateAccount()
            record = AccountRecord(
                id=new_id(),
                email=fields.email,
                password_hash=fields.password_hash,
                first_name=fields.first_name,
                last_name=fields.last_name,
                role=fields.role,
                phone=fields.phone,
                created_at=datetime.now(UTC),
            )
            self._by_id[record.id] = record
            return record

    def record_login(self, account_id: str, at: datetime) -> None:
        with self._lock:
            current = self._by_id.get(account_id)
            if current is not None:
                self._by_id[account_id] = replace(current, last_login_at=at)

    def set_role(self, account_id: str, role: AccountRole) -> None:
        """Test helper: change the stored role of an account."""
        with self._lock:
            self._by_id[account_id] = replace(self._by_id[account_id], role=role)

    def delete(self, account_id: str) -> None:
        with self._lock:
            self._by_id.pop(account_id, None)

"""Account model: the authentication identity of the platform."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, validates

from boxoffice.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class AccountRole(str, enum.Enum):
    """Closed set of privilege levels, lowest first."""

    USER = "USER"
    ORGANIZER = "ORGANIZER"
    ADMIN = "ADMIN"

    @classmethod
    def default(cls) -> AccountRole:
        """Role assigned to every self-registered account."""
        return cls.USER


class Account(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity holding login and display data.

    Fields
    ------
    email : str
        Login email, unique and compared exactly as stored (case-sensitive).
    password_hash : str
        bcrypt hash produced by the password hasher; never plaintext.
    first_name, last_name : str
        Display name fields.
    phone : str | None
        Optional contact number.
    role : AccountRole
        Privilege level, ``USER`` unless changed by an operator.
    email_verified : bool
        Whether the email address was confirmed.
    last_login_at : datetime | None
        Timestamp of the latest successful login.
    """

    __tablename__ = "accounts"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[AccountRole] = mapped_column(
        Enum(AccountRole, name="account_role", native_enum=False, length=16),
        nullable=False,
        default=AccountRole.USER,
        server_default=AccountRole.USER.value,
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_accounts_email"),
        Index("ix_accounts_role", "role"),
    )

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Reject blank or obviously malformed emails. Case is preserved.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("first_name", "last_name")
    def _validate_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()

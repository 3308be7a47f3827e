"""Refresh token model: one row per active session/device."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from boxoffice.core.extensions import db

from .base import ReprMixin, UUIDPKMixin


class RefreshToken(UUIDPKMixin, ReprMixin, db.Model):
    """
    Store-backed record of an issued refresh token.

    ``expires_at`` duplicates the signed expiry so it can be checked without
    verifying the signature.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(Text, nullable=False)
    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (UniqueConstraint("token", name="uq_refresh_tokens_token"),)

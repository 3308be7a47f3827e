"""Refresh token repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from boxoffice.models.refresh_token import RefreshToken
from boxoffice.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def delete_by_id(self, token_id: str) -> int:
        stmt = delete(RefreshToken).where(RefreshToken.id == token_id)
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_by_token(self, token: str) -> int:
        """Delete every row holding ``token``; returns the number removed."""
        stmt = delete(RefreshToken).where(RefreshToken.token == token)
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        """Purge rows whose ``expires_at`` is not after ``now``."""
        stmt = delete(RefreshToken).where(RefreshToken.expires_at <= now)
        return int(self.session.execute(stmt).rowcount or 0)

"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from boxoffice.repositories.account import AccountRepository
from boxoffice.repositories.base import BaseRepository
from boxoffice.repositories.refresh_token import RefreshTokenRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "RefreshTokenRepository",
]

"""Unit-of-Work backed store adapters."""

from .refresh_token_store import SQLAlchemyRefreshTokenStore
from .user_store import SQLAlchemyUserStore

__all__ = ["SQLAlchemyUserStore", "SQLAlchemyRefreshTokenStore"]

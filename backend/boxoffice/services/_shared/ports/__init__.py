"""
boxoffice.services._shared.ports
================================

*Ports* (hexagonal interfaces) the session manager depends on.

Modules
-------
- :mod:`user_store`:
    :class:`~.UserStore` plus the :class:`~.AccountRecord` read-model.
- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` plus :class:`~.RefreshTokenRecord`.
- :mod:`token_provider`:
    :class:`~.TokenProvider`, signing and verification of JWTs.
- :mod:`password_hasher`:
    :class:`~.PasswordHasher`, one-way password hashing.

Concrete adapters (SQLAlchemy, Redis, bcrypt, JWT) live under
``boxoffice.infra``. In-memory stores sit next to their ports for unit tests.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_provider import TokenProvider
from .user_store import AccountRecord, InMemoryUserStore, NewAccount, UserStore

__all__ = [
    "AccountRecord",
    "NewAccount",
    "UserStore",
    "InMemoryUserStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
    "TokenProvider",
    "PasswordHasher",
]

"""Service layer public API.

Callers import from :mod:`boxoffice.services` without knowing internal
structure.

Re-exports
----------
- Use cases (from ``boxoffice.services.auth``)
    * :class:`SessionManager`
- Errors (from ``boxoffice.services._shared.errors``)
    * :class:`ServiceError` and its credential/session subclasses
"""

from __future__ import annotations

from boxoffice.services._shared.errors import (
    DuplicateAccount,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFoundError,
    RefreshTokenExpired,
    ServiceError,
    ValidationFailure,
)
from boxoffice.services.auth import SessionManager

__all__ = [
    "SessionManager",
    "ServiceError",
    "DuplicateAccount",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "RefreshTokenExpired",
    "ValidationFailure",
    "NotFoundError",
]

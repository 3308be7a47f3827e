"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP. They are the stable contract between stores, the session manager and
the API layer. Translation to HTTP responses (RFC 7807) happens in
``boxoffice/core/errors.py``.

Messages are generic on purpose: none of them reveal whether an account or a
token exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name in the message; SQLite reports the
    offending ``table.column`` instead, so both spellings are accepted.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_accounts_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # uq_<table>_<column> -> "<table>.<column>" (SQLite wording)
    if constraint_name.startswith("uq_"):
        _, _, rest = constraint_name.partition("_")
        table, _, column = rest.rpartition("_")
        return bool(table) and f"{table}.{column}".lower() in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores or domain logic.
    - The API layer translates them to ``APIError``.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


# --------------------------------------------------------------------------- #
# Credential & session errors
# --------------------------------------------------------------------------- #


class DuplicateAccount(ServiceError):
    """Raised when registering an email that already has an account."""

    default_message = "An account with this email already exists"


class InvalidCredentials(ServiceError):
    """Raised for an unknown email or a wrong password (indistinguishable)."""

    default_message = "Invalid credentials"


class InvalidRefreshToken(ServiceError):
    """Raised when a refresh token cannot be verified or is not on record."""

    default_message = "Invalid refresh token"


class RefreshTokenExpired(ServiceError):
    """Raised when a stored refresh token has passed its expiry."""

    default_message = "Refresh token expired"


class ValidationFailure(ServiceError):
    """
    Raised when input fails validation, before any store access.

    :param errors: Field name -> list of messages.
    :type errors: dict[str, list[str]]
    """

    default_message = "Validation failed"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors


# --------------------------------------------------------------------------- #
# Generic errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in a store.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int = field(default="")

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found"

# boxoffice/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for self-registration.

    There is deliberately no ``role``: every self-registered account is a
    ``USER``.

    :param email: Login email, kept exactly as typed.
    :type email: str
    :param password: Raw password (hashed before storage).
    :type password: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    :param phone: Optional contact number.
    :type phone: str | None
    """

    email: str
    password: str
    first_name: str
    last_name: str
    phone: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: Account email (exact match).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Encoded refresh JWT of the session to end.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AccountSummaryOut:
    """
    Public account view; carries no credential material.

    :param role: Role name (``USER``, ``ORGANIZER`` or ``ADMIN``).
    :type role: str
    """

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    phone: str | None = None
    email_verified: bool = False
    created_at: datetime | None = None
    last_login_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Output DTO for register and login.

    :param user: Summary of the authenticated account.
    :type user: AccountSummaryOut
    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    """

    user: AccountSummaryOut
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class RefreshOut:
    """
    Output DTO for refresh.

    :param access_token: New encoded access JWT.
    :type access_token: str
    :param refresh_token: Replacement refresh JWT when rotation is enabled,
        otherwise ``None`` (the presented token stays valid).
    :type refresh_token: str | None
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    expires_in: int
    refresh_token: str | None = None
    token_type: str = "Bearer"


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param password_min_length: Minimum password length at registration.
    :type password_min_length: int
    :param rotate_refresh_tokens: Consume the presented refresh token on refresh.
    :type rotate_refresh_tokens: bool
    """

    access_expires: timedelta
    refresh_expires: timedelta
    password_min_length: int = 8
    rotate_refresh_tokens: bool = False

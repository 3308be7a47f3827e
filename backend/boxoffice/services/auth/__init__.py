"""Credential & session management use cases."""

from .dto import (
    AccountSummaryOut,
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RefreshOut,
    RegisterIn,
)
from .service import SessionManager

__all__ = [
    "SessionManager",
    "AuthTokenConfig",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "AccountSummaryOut",
    "AuthResultOut",
    "RefreshOut",
]

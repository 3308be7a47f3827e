"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccountSummarySchema,
    AuthResponseSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
)
from .health import ReadinessSchema

__all__ = [
    "RegisterSchema",
    "LoginSchema",
    "RefreshSchema",
    "AccountSummarySchema",
    "AuthResponseSchema",
    "TokenResponseSchema",
    "ReadinessSchema",
]

"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from boxoffice.core.security import get_session_manager
from boxoffice.services.auth import SessionManager

F = TypeVar("F", bound=Callable[..., Any])


def session_manager() -> SessionManager:
    """Return the session manager bound to the current application."""

    return get_session_manager()


def json_body() -> Any:
    """Return the parsed JSON body, or ``None`` when absent or malformed."""

    return request.get_json(silent=True)


def refresh_token_from_request() -> str:
    """Read the refresh token from the JSON body, falling back to the cookie."""

    body = json_body()
    if isinstance(body, dict):
        token = body.get("refresh_token")
        if isinstance(token, str) and token:
            return token
    if current_app.config.get("REFRESH_TOKEN_COOKIE"):
        name = current_app.config.get("REFRESH_TOKEN_COOKIE_NAME", "refresh_token")
        return request.cookies.get(name, "")
    return ""


def set_refresh_cookie(response: Response, token: str) -> None:
    """Attach the refresh token as an HttpOnly cookie when enabled."""

    config = current_app.config
    if not config.get("REFRESH_TOKEN_COOKIE"):
        return
    settings = current_app.extensions["security_settings"]
    response.set_cookie(
        config.get("REFRESH_TOKEN_COOKIE_NAME", "refresh_token"),
        token,
        max_age=int(settings.refresh_expires.total_seconds()),
        httponly=True,
        secure=bool(config.get("REFRESH_TOKEN_COOKIE_SECURE", True)),
        samesite="Strict",
        path=_auth_path(),
    )


def clear_refresh_cookie(response: Response) -> None:
    """Expire the refresh cookie when enabled."""

    config = current_app.config
    if not config.get("REFRESH_TOKEN_COOKIE"):
        return
    response.delete_cookie(
        config.get("REFRESH_TOKEN_COOKIE_NAME", "refresh_token"),
        path=_auth_path(),
        httponly=True,
        samesite="Strict",
    )


def _auth_path() -> str:
    return f"{current_app.config.get('API_BASE_PREFIX', '/api')}/v1/auth"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]

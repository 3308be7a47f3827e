"""Credential/session wiring: validated settings and the session manager."""

from __future__ import annotations

import logging

from flask import Flask, current_app

from boxoffice.core.config import ConfigurationError, load_security_settings
from boxoffice.services._shared.ports import RefreshTokenStore

log = logging.getLogger(__name__)

EXTENSION_KEY = "session_manager"


def _build_refresh_store(app: Flask) -> RefreshTokenStore:
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).strip().lower()
    if backend == "sqlalchemy":
        from boxoffice.infra.sqlalchemy import SQLAlchemyRefreshTokenStore

        return SQLAlchemyRefreshTokenStore()
    if backend == "redis":
        from boxoffice.core.extensions import get_redis
        from boxoffice.infra.redis import RedisRefreshTokenStore

        return RedisRefreshTokenStore(get_redis())
    raise ConfigurationError(f"Unknown REFRESH_TOKEN_BACKEND: {backend!r}")


def configure_jwt(app: Flask) -> None:
    """
    Validate security settings and feed the access-token half to Flask-JWT-Extended.

    Must run before :func:`boxoffice.core.extensions.init_app`.

    :raises ConfigurationError: On missing/shared secrets or bad values.
    """
    settings = load_security_settings(app.config)
    app.config["JWT_SECRET_KEY"] = settings.access_secret
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = settings.access_expires
    app.config["JWT_ALGORITHM"] = settings.algorithm
    app.extensions["security_settings"] = settings


def init_app(app: Flask) -> None:
    """Build the :class:`SessionManager` and store it in ``app.extensions``."""
    from boxoffice.infra.jwt import JWTTokenProvider
    from boxoffice.infra.security import BcryptPasswordHasher
    from boxoffice.infra.sqlalchemy import SQLAlchemyUserStore
    from boxoffice.services.auth import AuthTokenConfig, SessionManager

    settings = app.extensions.get("security_settings") or load_security_settings(app.config)
    manager = SessionManager(
        users=SQLAlchemyUserStore(),
        refresh_tokens=_build_refresh_store(app),
        tokens=JWTTokenProvider(refresh_secret=settings.refresh_secret, algorithm=settings.algorithm),
        hasher=BcryptPasswordHasher(rounds=settings.bcrypt_rounds),
        settings=AuthTokenConfig(
            access_expires=settings.access_expires,
            refresh_expires=settings.refresh_expires,
            password_min_length=settings.password_min_length,
            rotate_refresh_tokens=settings.rotate_refresh_tokens,
        ),
    )
    app.extensions[EXTENSION_KEY] = manager
    log.info(
        "Session manager ready (refresh backend=%s, rotation=%s)",
        app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy"),
        settings.rotate_refresh_tokens,
    )


def get_session_manager():
    """Return the :class:`SessionManager` of the current app."""
    manager = current_app.extensions.get(EXTENSION_KEY)
    if manager is None:
        raise RuntimeError("Session manager is not initialized.")
    return manager

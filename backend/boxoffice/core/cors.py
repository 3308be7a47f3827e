"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints based on application config.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS``, ``CORS_SUPPORTS_CREDENTIALS`` and
        ``CORS_MAX_AGE`` settings are consulted.

    Notes
    -----
    A blank or ``"*"`` origin list allows any origin and always disables
    credentials, since browsers reject wildcard origins with cookies. The
    refresh-token cookie therefore requires an explicit origin list.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = len(origins) == 0 or origins == ["*"]
    credentials = bool(app.config.get("CORS_SUPPORTS_CREDENTIALS")) and not wildcard

    prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    CORS(
        app,
        resources={rf"{prefix}/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=credentials,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )

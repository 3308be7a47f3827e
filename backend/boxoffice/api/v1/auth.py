"""Authentication endpoints backed by the session manager."""

from __future__ import annotations

from flask import Blueprint, current_app
from flask_jwt_extended import get_jwt_identity

from boxoffice.api.access import install_access_guard
from boxoffice.api.deps import (
    clear_refresh_cookie,
    json_body,
    json_response,
    refresh_token_from_request,
    session_manager,
    set_refresh_cookie,
    timing,
)
from boxoffice.core.errors import Unauthorized
from boxoffice.core.extensions import limiter
from boxoffice.schemas import AccountSummarySchema, AuthResponseSchema, TokenResponseSchema
from boxoffice.services._shared.errors import NotFoundError
from boxoffice.services.auth import LogoutIn
from boxoffice.services.auth.policies import AUTHENTICATED, PUBLIC
from boxoffice.services.auth.validation import (
    validate_login,
    validate_refresh,
    validate_register,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

install_access_guard(
    bp,
    {
        "register": PUBLIC,
        "login": PUBLIC,
        "refresh": PUBLIC,
        "logout": PUBLIC,
        "profile": AUTHENTICATED,
    },
)

auth_schema = AuthResponseSchema()
token_schema = TokenResponseSchema()
summary_schema = AccountSummarySchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/register")
@timing
def register():
    """Create a ``USER`` account and return it with a token pair."""

    settings = current_app.extensions["security_settings"]
    dto = validate_register(
        json_body(), password_min_length=settings.password_min_length
    ).unwrap()
    result = session_manager().register(dto)
    response = json_response({"data": auth_schema.dump(result)}, status=201)
    set_refresh_cookie(response, result.refresh_token)
    return response


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and open a new session."""

    dto = validate_login(json_body()).unwrap()
    result = session_manager().login(dto)
    response = json_response({"data": auth_schema.dump(result)})
    set_refresh_cookie(response, result.refresh_token)
    return response


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access token."""

    dto = validate_refresh({"refresh_token": refresh_token_from_request()}).unwrap()
    result = session_manager().refresh(dto)
    payload = token_schema.dump(result)
    if result.refresh_token is None:
        payload.pop("refresh_token", None)
    response = json_response({"data": payload})
    if result.refresh_token is not None:
        set_refresh_cookie(response, result.refresh_token)
    return response


@bp.post("/logout")
@timing
def logout():
    """End the session of the given refresh token. Always 204."""

    session_manager().logout(LogoutIn(refresh_token=refresh_token_from_request()))
    response = current_app.response_class(status=204)
    clear_refresh_cookie(response)
    return response


@bp.get("/profile")
@timing
def profile():
    """Return the account behind the access token."""

    try:
        summary = session_manager().profile(str(get_jwt_identity()))
    except NotFoundError as exc:
        raise Unauthorized("Account no longer exists") from exc
    return json_response({"data": summary_schema.dump(summary)})

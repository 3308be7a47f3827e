"""Token provider backed by Flask-JWT-Extended (access) and PyJWT (refresh)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from boxoffice.services._shared.errors import InvalidRefreshToken, RefreshTokenExpired
from boxoffice.services._shared.ports import TokenProvider

REFRESH_TOKEN_TYPE = "refresh"


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Sign access and refresh tokens with separate keys.

    Access tokens are produced by Flask-JWT-Extended so ``@jwt_required`` and
    ``verify_jwt_in_request`` can check them; the access key is the app's
    ``JWT_SECRET_KEY``. Refresh tokens are signed here with PyJWT and the
    refresh key, so an access token is never accepted as a refresh token and
    vice versa.

    .. note::
       ``create_access_token`` requires an active Flask app context.

    :param refresh_secret: HMAC key for refresh tokens.
    :param algorithm: JWS algorithm shared by both token kinds.
    """

    refresh_secret: str = field(repr=False)
    algorithm: str = "HS256"

    def create_access_token(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        extra = {k: v for k, v in claims.items() if k != "sub"}
        return cast(
            str,
            _create_access(
                identity=str(claims["sub"]),
                additional_claims=extra,
                expires_delta=expires_delta,
            ),
        )

    def create_refresh_token(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            **claims,
            "sub": str(claims["sub"]),
            "type": REFRESH_TOKEN_TYPE,
            # Random jti: two tokens for the same account never collide.
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + expires_delta,
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=self.algorithm)

    def decode_refresh_token(self, token: str, *, verify_exp: bool = True) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.refresh_secret,
                algorithms=[self.algorithm],
                options={"verify_exp": verify_exp, "require": ["sub", "exp", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            # PyJWT checks the signature before the claims.
            raise RefreshTokenExpired() from exc
        except jwt.PyJWTError as exc:
            raise InvalidRefreshToken() from exc

        if payload.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidRefreshToken()
        return cast(dict[str, Any], payload)

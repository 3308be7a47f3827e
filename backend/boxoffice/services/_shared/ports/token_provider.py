from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Port for issuing and verifying the signed tokens of a session.

    Access and refresh tokens MUST be signed with different keys.
    """

    def create_access_token(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        """
        Sign an access token.

        :param claims: Must contain ``sub``; ``email`` and ``role`` are embedded.
        :param expires_delta: Lifetime from now.
        """

    def create_refresh_token(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        """Sign a refresh token carrying a fresh random ``jti``."""

    def decode_refresh_token(self, token: str, *, verify_exp: bool = True) -> dict[str, Any]:
        """
        Verify a refresh token and return its claims.

        :raises RefreshTokenExpired: Signature valid but ``exp`` passed
            (only when ``verify_exp`` is true).
        :raises InvalidRefreshToken: Any other verification failure.
        """

# boxoffice/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from boxoffice.core.logger import token_fingerprint
from boxoffice.models.account import AccountRole
from boxoffice.services._shared.errors import (
    DuplicateAccount,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFoundError,
    RefreshTokenExpired,
    ValidationFailure,
)
from boxoffice.services._shared.ports import (
    AccountRecord,
    NewAccount,
    PasswordHasher,
    RefreshTokenStore,
    TokenProvider,
    UserStore,
)
from boxoffice.services.auth.dto import (
    AccountSummaryOut,
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RefreshOut,
    RegisterIn,
)

log = logging.getLogger(__name__)

# Verified against when the email is unknown so both login failures cost one bcrypt check.
_TIMING_PASSWORD = "not-a-real-password-timing-equaliser"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def to_summary(account: AccountRecord) -> AccountSummaryOut:
    """Project an account record onto its public view."""
    return AccountSummaryOut(
        id=account.id,
        email=account.email,
        first_name=account.first_name,
        last_name=account.last_name,
        role=account.role.value,
        phone=account.phone,
        email_verified=account.email_verified,
        created_at=account.created_at,
        last_login_at=account.last_login_at,
    )


class SessionManager:
    """
    Credential and session lifecycle: register, login, refresh, logout.

    Security
    --------
    - Passwords are bcrypt-hashed through the :class:`PasswordHasher` port and
      never logged.
    - Access and refresh tokens are signed with different keys by the
      :class:`TokenProvider`.
    - Every refresh token is recorded in the :class:`RefreshTokenStore` before
      it reaches the client; only recorded tokens can be refreshed.
    - Login failures never reveal whether the email exists.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        refresh_tokens: RefreshTokenStore,
        tokens: TokenProvider,
        hasher: PasswordHasher,
        settings: AuthTokenConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the manager with its collaborators.

        :param users: Account store.
        :param refresh_tokens: Refresh token store.
        :param tokens: JWT signing/verification adapter.
        :param hasher: Password hashing adapter.
        :param settings: Token lifetimes and password policy.
        :param clock: Returns the current UTC time; defaults to ``datetime.now(UTC)``.
        """
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.tokens = tokens
        self.hasher = hasher
        self.cfg = settings
        self._clock = clock or _utcnow
        self._timing_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a ``USER`` account and open its first session.

        :param dto: Registration input.
        :returns: Account summary and a token pair.
        :raises ValidationFailure: Password shorter than the configured minimum.
        :raises DuplicateAccount: Email already registered (also on a lost race).
        """
        if len(dto.password) < self.cfg.password_min_length:
            raise ValidationFailure(
                {
                    "password": [
                        f"Password must be at least {self.cfg.password_min_length} characters."
                    ]
                }
            )

        if self.users.find_by_email(dto.email) is not None:
            log.info("auth.register.duplicate")
            raise DuplicateAccount()

        account = self.users.create(
            NewAccount(
                email=dto.email,
                password_hash=self.hasher.hash(dto.password),
                first_name=dto.first_name,
                last_name=dto.last_name,
                role=AccountRole.default(),
                phone=dto.phone,
            )
        )
        try:
            access, refresh = self._issue_pair(account)
        except Exception:
            # No session could be opened: undo the insert so the email stays free.
            log.warning(
                "auth.register.rolled_back", extra={"account_id": account.id}, exc_info=True
            )
            self.users.delete(account.id)
            raise
        log.info("auth.register", extra={"account_id": account.id})
        return AuthResultOut(
            user=to_summary(account),
            access_token=access,
            refresh_token=refresh,
            expires_in=self._access_ttl_seconds(),
        )

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Verify credentials and open an additional session.

        Existing sessions of the account stay valid.

        :param dto: Login input.
        :returns: Account summary and a fresh token pair.
        :raises InvalidCredentials: Unknown email or wrong password.
        """
        account = self.users.find_by_email(dto.email)
        if account is None:
            self.hasher.verify(dto.password, self._dummy_hash())
            log.info("auth.login.failed", extra={"reason": "unknown_email"})
            raise InvalidCredentials()
        if not self.hasher.verify(dto.password, account.password_hash):
            log.info(
                "auth.login.failed",
                extra={"reason": "bad_password", "account_id": account.id},
            )
            raise InvalidCredentials()

        now = self._clock()
        self.users.record_login(account.id, now)
        access, refresh = self._issue_pair(account)
        log.info("auth.login", extra={"account_id": account.id})

        return AuthResultOut(
            user=replace(to_summary(account), last_login_at=now),
            access_token=access,
            refresh_token=refresh,
            expires_in=self._access_ttl_seconds(),
        )

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> RefreshOut:
        """
        Exchange a recorded refresh token for a new access token.

        Without rotation the presented refresh token stays valid and may be
        replayed until it expires or is logged out.

        :param dto: Refresh input.
        :returns: New access token (and a replacement refresh token under rotation).
        :raises RefreshTokenExpired: Token expired; its record is removed.
        :raises InvalidRefreshToken: Any other verification failure.
        """
        token = dto.refresh_token
        fp = token_fingerprint(token)
        try:
            return self._refresh(token)
        except RefreshTokenExpired:
            log.info("auth.refresh.rejected", extra={"reason": "expired", "token_fp": fp})
            raise
        except InvalidRefreshToken as exc:
            log.info(
                "auth.refresh.rejected",
                extra={"reason": str(exc.__cause__ or exc), "token_fp": fp},
            )
            raise
        except Exception as exc:
            log.warning(
                "auth.refresh.rejected",
                extra={"reason": type(exc).__name__, "token_fp": fp},
                exc_info=True,
            )
            raise InvalidRefreshToken() from exc

    def _refresh(self, token: str) -> RefreshOut:
        try:
            claims = self.tokens.decode_refresh_token(token)
        except RefreshTokenExpired:
            self._discard_expired(token)
            raise

        subject = str(claims["sub"])
        record = self.refresh_tokens.find_by_token(token)
        if record is None:
            raise InvalidRefreshToken("Refresh token not on record")
        if record.account_id != subject:
            raise InvalidRefreshToken("Refresh token subject mismatch")

        now = self._clock()
        if record.is_expired(now):
            self.refresh_tokens.delete_by_id(record.id)
            raise RefreshTokenExpired()

        account = self.users.find_by_id(subject)
        if account is None:
            raise InvalidRefreshToken("Account no longer exists")

        access = self.tokens.create_access_token(
            self._claims(account), expires_delta=self.cfg.access_expires
        )
        rotated: str | None = None
        if self.cfg.rotate_refresh_tokens:
            self.refresh_tokens.delete_by_id(record.id)
            rotated = self._issue_refresh(account)
        log.info("auth.refresh", extra={"account_id": account.id})
        return RefreshOut(
            access_token=access,
            refresh_token=rotated,
            expires_in=self._access_ttl_seconds(),
        )

    def _discard_expired(self, token: str) -> None:
        """Remove the record of a token whose signed expiry passed."""
        claims = self.tokens.decode_refresh_token(token, verify_exp=False)
        record = self.refresh_tokens.find_by_token(token)
        if record is not None and record.account_id == str(claims["sub"]):
            self.refresh_tokens.delete_by_id(record.id)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        End the session holding ``dto.refresh_token``.

        Idempotent and never fails: unknown, malformed or empty tokens are a
        no-op, and store errors are logged only. Access tokens already issued
        stay valid until they expire.
        """
        token = dto.refresh_token
        if not token:
            return
        try:
            removed = self.refresh_tokens.delete_by_token(token)
        except Exception:
            log.warning(
                "auth.logout.store_error",
                extra={"token_fp": token_fingerprint(token)},
                exc_info=True,
            )
            return
        log.info("auth.logout removed=%d", removed, extra={"token_fp": token_fingerprint(token)})

    # ------------------------------------------------------------------ #
    # Account views
    # ------------------------------------------------------------------ #

    def profile(self, account_id: str) -> AccountSummaryOut:
        """
        Return the summary of the account behind a verified access token.

        :raises NotFoundError: The account was deleted after the token was issued.
        """
        account = self.users.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return to_summary(account)

    def get_account(self, account_id: str) -> AccountSummaryOut:
        """
        Admin lookup of any account.

        :raises NotFoundError: No account has this id.
        """
        account = self.users.find_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return to_summary(account)

    # ------------------------------------------------------------------ #
    # Token issuance
    # ------------------------------------------------------------------ #

    def _claims(self, account: AccountRecord) -> dict[str, Any]:
        return {"sub": account.id, "email": account.email, "role": account.role.value}

    def _issue_refresh(self, account: AccountRecord) -> str:
        # The stored expiry mirrors the signed one.
        expires_at = self._clock() + self.cfg.refresh_expires
        refresh = self.tokens.create_refresh_token(
            self._claims(account), expires_delta=self.cfg.refresh_expires
        )
        self.refresh_tokens.create(token=refresh, account_id=account.id, expires_at=expires_at)
        return refresh

    def _issue_pair(self, account: AccountRecord) -> tuple[str, str]:
        """Sign an access/refresh pair with identical claims and record the refresh token."""
        access = self.tokens.create_access_token(
            self._claims(account), expires_delta=self.cfg.access_expires
        )
        return access, self._issue_refresh(account)

    def _access_ttl_seconds(self) -> int:
        return int(self.cfg.access_expires.total_seconds())

    def _dummy_hash(self) -> str:
        if self._timing_hash is None:
            self._timing_hash = self.hasher.hash(_TIMING_PASSWORD)
        return self._timing_hash

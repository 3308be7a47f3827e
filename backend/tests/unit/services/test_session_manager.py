# tests/unit/services/test_session_manager.py
"""SessionManager behaviour over in-memory stores and the real token provider."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from flask_jwt_extended import decode_token
from freezegun import freeze_time

from boxoffice.core.config import TestingConfig
from boxoffice.infra.jwt import JWTTokenProvider
from boxoffice.infra.security import BcryptPasswordHasher
from boxoffice.models.account import AccountRole
from boxoffice.services._shared.errors import (
    DuplicateAccount,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFoundError,
    RefreshTokenExpired,
    ValidationFailure,
)
from boxoffice.services._shared.ports import InMemoryRefreshTokenStore, InMemoryUserStore
from boxoffice.services.auth import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    SessionManager,
)

ANN = RegisterIn(email="a@x.com", password="LongPass1", first_name="Ann", last_name="A")


class CountingHasher:
    """Wrap a fast bcrypt hasher and count ``verify`` calls."""

    def __init__(self) -> None:
        self._inner = BcryptPasswordHasher(rounds=4)
        self.verify_calls = 0

    def hash(self, raw: str) -> str:
        return self._inner.hash(raw)

    def verify(self, raw: str, hashed: str) -> bool:
        self.verify_calls += 1
        return self._inner.verify(raw, hashed)


class RefusingRefreshStore(InMemoryRefreshTokenStore):
    """Refresh store that cannot record new tokens."""

    def create(self, *, token, account_id, expires_at):
        raise ConnectionError("store down")


class FailingRefreshStore(InMemoryRefreshTokenStore):
    """Refresh store whose reads and deletes blow up like a lost connection."""

    def find_by_token(self, token):
        raise ConnectionError("store down")

    def delete_by_token(self, token):
        raise ConnectionError("store down")


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def users() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def refresh_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def hasher() -> CountingHasher:
    return CountingHasher()


def build_manager(users, refresh_store, hasher, *, rotate=False, clock=None) -> SessionManager:
    return SessionManager(
        users=users,
        refresh_tokens=refresh_store,
        tokens=JWTTokenProvider(refresh_secret=TestingConfig.JWT_REFRESH_SECRET),
        hasher=hasher,
        settings=AuthTokenConfig(
            access_expires=timedelta(minutes=30),
            refresh_expires=timedelta(days=7),
            rotate_refresh_tokens=rotate,
        ),
        clock=clock,
    )


@pytest.fixture()
def manager(app, users, refresh_store, hasher) -> SessionManager:
    """
    Build a SessionManager wired to in-memory stores.

    .. note::
       Access tokens come from Flask-JWT-Extended, so an app context is
       required (the session-scoped ``db`` fixture provides it).
    """
    return build_manager(users, refresh_store, hasher)


# ------------------------------ Register ---------------------------------- #
class TestRegister:
    def test_returns_summary_and_token_pair(self, manager, refresh_store):
        result = manager.register(ANN)

        assert result.user.email == "a@x.com"
        assert result.user.role == "USER"
        assert result.user.email_verified is False
        assert result.access_token and result.refresh_token
        assert result.expires_in == 30 * 60
        assert refresh_store.count_for(result.user.id) == 1

    def test_password_is_stored_hashed(self, manager, users):
        manager.register(ANN)
        stored = users.find_by_email("a@x.com")
        assert stored.password_hash != "LongPass1"
        assert BcryptPasswordHasher(rounds=4).verify("LongPass1", stored.password_hash)

    def test_second_registration_is_duplicate(self, manager):
        manager.register(ANN)
        with pytest.raises(DuplicateAccount):
            manager.register(ANN)

    def test_email_uniqueness_is_case_sensitive(self, manager):
        manager.register(ANN)
        other = manager.register(
            RegisterIn(email="A@x.com", password="LongPass1", first_name="Ann", last_name="A")
        )
        assert other.user.email == "A@x.com"

    def test_short_password_fails_before_store_access(self, manager, users, hasher):
        with pytest.raises(ValidationFailure) as excinfo:
            manager.register(
                RegisterIn(email="b@x.com", password="short", first_name="B", last_name="B")
            )
        assert "password" in excinfo.value.errors
        assert users.find_by_email("b@x.com") is None

    def test_role_is_always_user(self, manager, users):
        result = manager.register(ANN)
        assert users.find_by_id(result.user.id).role is AccountRole.USER
        assert decode_token(result.access_token)["role"] == "USER"

    def test_token_pair_shares_identity_claims(self, manager):
        result = manager.register(ANN)
        access = decode_token(result.access_token)
        refresh = manager.tokens.decode_refresh_token(result.refresh_token)
        for claim in ("sub", "email", "role"):
            assert access[claim] == refresh[claim]
        assert access["sub"] == result.user.id

    def test_concurrent_registrations_exactly_one_wins(self, app, users, refresh_store, hasher):
        manager = build_manager(users, refresh_store, hasher)
        barrier = threading.Barrier(4)

        def attempt(_):
            with app.app_context():
                barrier.wait()
                try:
                    manager.register(ANN)
                    return "created"
                except DuplicateAccount:
                    return "duplicate"

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = list(pool.map(attempt, range(4)))

        assert outcomes.count("created") == 1
        assert outcomes.count("duplicate") == 3

    def test_failed_session_issue_leaves_no_account(self, app, users, hasher):
        manager = build_manager(users, RefusingRefreshStore(), hasher)
        with pytest.raises(ConnectionError):
            manager.register(ANN)
        assert users.find_by_email("a@x.com") is None

        manager.refresh_tokens = InMemoryRefreshTokenStore()
        result = manager.register(ANN)
        assert result.user.email == "a@x.com"

    def test_lost_race_inside_store_surfaces_as_duplicate(self, manager, users):
        manager.register(ANN)
        # Simulate the check passing before the competing insert commits
        users.find_by_email = lambda email: None
        with pytest.raises(DuplicateAccount):
            manager.register(ANN)


# -------------------------------- Login ----------------------------------- #
class TestLogin:
    def test_correct_credentials(self, manager):
        manager.register(ANN)
        result = manager.login(LoginIn(email="a@x.com", password="LongPass1"))
        assert result.user.role == "USER"
        assert decode_token(result.access_token)["role"] == "USER"
        assert result.user.last_login_at is not None

    def test_login_records_timestamp(self, app, users, refresh_store, hasher):
        at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        manager = build_manager(users, refresh_store, hasher, clock=lambda: at)
        manager.register(ANN)
        manager.login(LoginIn(email="a@x.com", password="LongPass1"))
        assert users.find_by_email("a@x.com").last_login_at == at

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, manager):
        manager.register(ANN)
        with pytest.raises(InvalidCredentials) as wrong:
            manager.login(LoginIn(email="a@x.com", password="wrong"))
        with pytest.raises(InvalidCredentials) as unknown:
            manager.login(LoginIn(email="nobody@x.com", password="wrong"))
        assert str(wrong.value) == str(unknown.value)

    def test_unknown_email_still_runs_a_hash_check(self, manager, hasher):
        with pytest.raises(InvalidCredentials):
            manager.login(LoginIn(email="nobody@x.com", password="whatever1"))
        assert hasher.verify_calls == 1

    def test_email_lookup_is_exact(self, manager):
        manager.register(ANN)
        with pytest.raises(InvalidCredentials):
            manager.login(LoginIn(email="A@X.COM", password="LongPass1"))

    def test_login_is_additive(self, manager, refresh_store):
        registered = manager.register(ANN)
        second = manager.login(LoginIn(email="a@x.com", password="LongPass1"))
        assert refresh_store.count_for(registered.user.id) == 2
        assert second.refresh_token != registered.refresh_token
        # the earlier session still refreshes
        manager.refresh(RefreshIn(refresh_token=registered.refresh_token))

    def test_role_claim_tracks_stored_role(self, manager, users):
        registered = manager.register(ANN)
        users.set_role(registered.user.id, AccountRole.ORGANIZER)
        result = manager.login(LoginIn(email="a@x.com", password="LongPass1"))
        assert decode_token(result.access_token)["role"] == "ORGANIZER"


# ------------------------------- Refresh ---------------------------------- #
class TestRefresh:
    def test_issues_new_distinct_access_token(self, manager):
        registered = manager.register(ANN)
        out = manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert out.access_token != registered.access_token
        assert out.refresh_token is None
        assert decode_token(out.access_token)["sub"] == registered.user.id

    def test_replay_succeeds_without_rotation(self, manager):
        """No rotation: the same refresh token may be presented again."""
        registered = manager.register(ANN)
        first = manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        second = manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert first.access_token != second.access_token

    def test_refresh_picks_up_role_change(self, manager, users):
        registered = manager.register(ANN)
        users.set_role(registered.user.id, AccountRole.ADMIN)
        out = manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert decode_token(out.access_token)["role"] == "ADMIN"

    def test_rotation_consumes_presented_token(self, app, users, refresh_store, hasher):
        manager = build_manager(users, refresh_store, hasher, rotate=True)
        registered = manager.register(ANN)

        out = manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert out.refresh_token and out.refresh_token != registered.refresh_token
        assert refresh_store.find_by_token(registered.refresh_token) is None
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        manager.refresh(RefreshIn(refresh_token=out.refresh_token))

    def test_unrecorded_token_is_invalid(self, manager, refresh_store):
        registered = manager.register(ANN)
        refresh_store.delete_by_token(registered.refresh_token)
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))

    def test_record_owned_by_other_account_is_invalid(self, manager, refresh_store):
        ann = manager.register(ANN)
        bob = manager.register(
            RegisterIn(email="b@x.com", password="LongPass1", first_name="Bob", last_name="B")
        )
        record = refresh_store.find_by_token(ann.refresh_token)
        refresh_store.delete_by_id(record.id)
        refresh_store.create(
            token=ann.refresh_token, account_id=bob.user.id, expires_at=record.expires_at
        )
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=ann.refresh_token))

    def test_access_token_is_rejected(self, manager):
        registered = manager.register(ANN)
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.access_token))

    @pytest.mark.parametrize("garbage", ["", "not.a.jwt", "x" * 300])
    def test_garbage_is_invalid(self, manager, garbage):
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=garbage))

    def test_store_failure_collapses_to_invalid(self, app, users, hasher):
        manager = build_manager(users, InMemoryRefreshTokenStore(), hasher)
        registered = manager.register(ANN)
        manager.refresh_tokens = FailingRefreshStore()
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))

    def test_deleted_account_is_invalid(self, manager, users):
        registered = manager.register(ANN)
        users.delete(registered.user.id)
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))

    def test_stored_expiry_passed_deletes_record(self, app, users, refresh_store, hasher):
        now = [datetime.now(UTC)]
        manager = build_manager(users, refresh_store, hasher, clock=lambda: now[0])
        registered = manager.register(ANN)

        now[0] += timedelta(days=8)
        with pytest.raises(RefreshTokenExpired):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert refresh_store.find_by_token(registered.refresh_token) is None

    def test_signed_expiry_passed_deletes_record(self, manager, refresh_store):
        with freeze_time("2026-01-01 00:00:00") as frozen:
            registered = manager.register(ANN)
            frozen.tick(timedelta(days=8))
            with pytest.raises(RefreshTokenExpired):
                manager.refresh(RefreshIn(refresh_token=registered.refresh_token))
        assert refresh_store.find_by_token(registered.refresh_token) is None


# -------------------------------- Logout ---------------------------------- #
class TestLogout:
    def test_logout_revokes_refresh_token(self, manager, refresh_store):
        registered = manager.register(ANN)
        manager.logout(LogoutIn(refresh_token=registered.refresh_token))
        assert refresh_store.find_by_token(registered.refresh_token) is None
        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=registered.refresh_token))

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_logout_never_fails(self, manager, token):
        assert manager.logout(LogoutIn(refresh_token=token)) is None

    def test_logout_twice_is_fine(self, manager):
        registered = manager.register(ANN)
        manager.logout(LogoutIn(refresh_token=registered.refresh_token))
        manager.logout(LogoutIn(refresh_token=registered.refresh_token))

    def test_logout_swallows_store_errors(self, app, users, hasher):
        manager = build_manager(users, FailingRefreshStore(), hasher)
        manager.logout(LogoutIn(refresh_token="anything"))

    def test_sessions_are_independent(self, manager):
        """register -> login -> logout(first) leaves the second session usable."""
        first = manager.register(ANN)
        second = manager.login(LoginIn(email="a@x.com", password="LongPass1"))

        manager.logout(LogoutIn(refresh_token=first.refresh_token))

        with pytest.raises(InvalidRefreshToken):
            manager.refresh(RefreshIn(refresh_token=first.refresh_token))
        assert manager.refresh(RefreshIn(refresh_token=second.refresh_token)).access_token


# ---------------------------- Account views ------------------------------- #
class TestAccountViews:
    def test_profile(self, manager):
        registered = manager.register(ANN)
        profile = manager.profile(registered.user.id)
        assert profile.email == "a@x.com"
        assert not hasattr(profile, "password_hash")

    def test_profile_of_missing_account(self, manager):
        with pytest.raises(NotFoundError):
            manager.profile("missing")

    def test_get_account_missing(self, manager):
        with pytest.raises(NotFoundError):
            manager.get_account("missing")

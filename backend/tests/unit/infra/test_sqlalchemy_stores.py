"""SQLAlchemy-backed UserStore and RefreshTokenStore adapters."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from boxoffice.infra.sqlalchemy import SQLAlchemyRefreshTokenStore, SQLAlchemyUserStore
from boxoffice.models.account import AccountRole
from boxoffice.services._shared.errors import DuplicateAccount
from boxoffice.services._shared.ports import NewAccount
from tests.factories.account import AccountFactory, RefreshTokenFactory


def _new(email: str = "a@x.com", **overrides) -> NewAccount:
    fields = {
        "email": email,
        "password_hash": "$2b$04$notarealhash",
        "first_name": "Ann",
        "last_name": "A",
    }
    fields.update(overrides)
    return NewAccount(**fields)


@pytest.fixture()
def users(session) -> SQLAlchemyUserStore:
    return SQLAlchemyUserStore()


@pytest.fixture()
def tokens(session) -> SQLAlchemyRefreshTokenStore:
    return SQLAlchemyRefreshTokenStore()


class TestSQLAlchemyUserStore:
    def test_create_returns_record(self, users):
        record = users.create(_new(phone="+34 600 000 000"))

        assert record.id
        assert record.role is AccountRole.USER
        assert record.email_verified is False
        assert record.phone == "+34 600 000 000"
        assert record.created_at is not None

    def test_create_honours_requested_role(self, users):
        record = users.create(_new(role=AccountRole.ADMIN))
        assert users.find_by_id(record.id).role is AccountRole.ADMIN

    def test_duplicate_email_maps_to_domain_error(self, users):
        users.create(_new())
        with pytest.raises(DuplicateAccount):
            users.create(_new(first_name="Other"))
        # the failed insert leaves the store usable
        assert users.find_by_email("a@x.com").first_name == "Ann"

    def test_find_by_email_exact_match(self, users):
        users.create(_new("Mixed@Case.com"))
        assert users.find_by_email("Mixed@Case.com") is not None
        assert users.find_by_email("mixed@case.com") is None

    def test_find_missing(self, users):
        assert users.find_by_email("nobody@x.com") is None
        assert users.find_by_id("missing") is None

    def test_record_login_is_timezone_aware(self, users):
        account = AccountFactory()
        at = datetime(2026, 2, 3, 4, 5, 6, tzinfo=UTC)

        users.record_login(account.id, at)

        stored = users.find_by_id(account.id)
        assert stored.last_login_at == at
        assert stored.last_login_at.tzinfo is not None
        assert stored.created_at.tzinfo is not None

    def test_delete(self, users):
        record = users.create(_new())
        users.delete(record.id)
        users.delete(record.id)
        assert users.find_by_email("a@x.com") is None

    def test_record_login_unknown_account_is_noop(self, users):
        users.record_login("missing", datetime.now(UTC))


class TestSQLAlchemyRefreshTokenStore:
    def test_create_and_find(self, tokens):
        account = AccountFactory()
        expires = datetime.now(UTC) + timedelta(days=7)

        created = tokens.create(token="tok-1", account_id=account.id, expires_at=expires)
        found = tokens.find_by_token("tok-1")

        assert found.id == created.id
        assert found.account_id == account.id
        assert found.expires_at == expires
        assert found.expires_at.tzinfo is not None

    def test_find_unknown(self, tokens):
        assert tokens.find_by_token("nope") is None

    def test_delete_by_token_reports_count(self, tokens):
        account = AccountFactory()
        RefreshTokenFactory(account=account, token="tok-2")

        assert tokens.delete_by_token("tok-2") == 1
        assert tokens.delete_by_token("tok-2") == 0
        assert tokens.find_by_token("tok-2") is None

    def test_delete_by_id_is_idempotent(self, tokens):
        row = RefreshTokenFactory(account=AccountFactory())

        tokens.delete_by_id(row.id)
        tokens.delete_by_id(row.id)
        assert tokens.find_by_token(row.token) is None

    def test_purge_expired(self, tokens):
        account = AccountFactory()
        now = datetime.now(UTC)
        RefreshTokenFactory(account=account, token="old", expires_at=now - timedelta(hours=1))
        RefreshTokenFactory(account=account, token="edge", expires_at=now)
        RefreshTokenFactory(account=account, token="live", expires_at=now + timedelta(hours=1))

        assert tokens.purge_expired(now) == 2
        assert tokens.find_by_token("live") is not None
        assert tokens.find_by_token("edge") is None

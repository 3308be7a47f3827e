"""In-memory store doubles honour the store contracts."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from boxoffice.models.account import AccountRole
from boxoffice.services._shared.errors import DuplicateAccount
from boxoffice.services._shared.ports import (
    InMemoryRefreshTokenStore,
    InMemoryUserStore,
    NewAccount,
)


def _new(email: str = "a@x.com") -> NewAccount:
    return NewAccount(email=email, password_hash="h", first_name="Ann", last_name="A")


class TestInMemoryUserStore:
    def test_create_and_find(self):
        store = InMemoryUserStore()
        created = store.create(_new())
        assert created.role is AccountRole.USER
        assert store.find_by_email("a@x.com") == created
        assert store.find_by_id(created.id) == created

    def test_email_match_is_case_sensitive(self):
        store = InMemoryUserStore()
        store.create(_new("a@x.com"))
        assert store.find_by_email("A@x.com") is None
        store.create(_new("A@x.com"))

    def test_duplicate_email(self):
        store = InMemoryUserStore()
        store.create(_new())
        with pytest.raises(DuplicateAccount):
            store.create(_new())

    def test_record_login(self):
        store = InMemoryUserStore()
        created = store.create(_new())
        at = datetime(2026, 1, 1, tzinfo=UTC)
        store.record_login(created.id, at)
        assert store.find_by_id(created.id).last_login_at == at


class TestInMemoryRefreshTokenStore:
    def test_create_find_delete(self):
        store = InMemoryRefreshTokenStore()
        expires = datetime.now(UTC) + timedelta(days=7)
        record = store.create(token="t1", account_id="acc", expires_at=expires)
        assert store.find_by_token("t1") == record
        store.delete_by_id(record.id)
        assert store.find_by_token("t1") is None

    def test_delete_by_token_counts(self):
        store = InMemoryRefreshTokenStore()
        expires = datetime.now(UTC) + timedelta(days=7)
        store.create(token="t1", account_id="acc", expires_at=expires)
        assert store.delete_by_token("t1") == 1
        assert store.delete_by_token("t1") == 0
        assert store.delete_by_token("never-issued") == 0

    def test_delete_by_id_is_idempotent(self):
        InMemoryRefreshTokenStore().delete_by_id("missing")

    def test_purge_expired(self):
        store = InMemoryRefreshTokenStore()
        now = datetime.now(UTC)
        store.create(token="old", account_id="acc", expires_at=now - timedelta(seconds=1))
        store.create(token="new", account_id="acc", expires_at=now + timedelta(days=1))
        assert store.purge_expired(now) == 1
        assert store.find_by_token("old") is None
        assert store.find_by_token("new") is not None

"""Tests for the Account and RefreshToken models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from boxoffice.models import Account, AccountRole, RefreshToken
from tests.factories.account import AccountFactory


def _account(**overrides) -> Account:
    fields = {
        "email": "ann@example.com",
        "password_hash": "$2b$04$notarealhash",
        "first_name": "Ann",
        "last_name": "A",
    }
    fields.update(overrides)
    return Account(**fields)


class TestAccount:
    def test_defaults_after_flush(self, session):
        account = _account()
        session.add(account)
        session.flush()

        assert account.id
        assert account.role is AccountRole.USER
        assert account.email_verified is False
        assert account.last_login_at is None

    def test_email_case_is_preserved(self, session):
        account = _account(email="  Ann.Smith@Example.COM ")
        assert account.email == "Ann.Smith@Example.COM"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "ann@localhost"])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(ValueError):
            _account(email=email)

    @pytest.mark.parametrize("field", ["first_name", "last_name"])
    def test_blank_names_rejected(self, field):
        with pytest.raises(ValueError):
            _account(**{field: "   "})

    def test_email_unique_exact(self, session):
        session.add(_account())
        session.flush()

        session.add(_account(first_name="Other"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_emails_differing_in_case_coexist(self, session):
        session.add(_account())
        session.add(_account(email="ANN@example.com"))
        session.flush()

        assert session.query(Account).count() == 2

    def test_repr_has_id(self):
        account = AccountFactory()
        assert repr(account) == f"<Account id={account.id}>"

    def test_default_role(self):
        assert AccountRole.default() is AccountRole.USER


class TestRefreshToken:
    def test_token_value_unique(self, session):
        account = AccountFactory()
        expires = datetime.now(UTC) + timedelta(days=7)
        session.add(RefreshToken(token="same", account_id=account.id, expires_at=expires))
        session.flush()

        session.add(RefreshToken(token="same", account_id=account.id, expires_at=expires))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_created_at_filled_by_database(self, session):
        account = AccountFactory()
        row = RefreshToken(
            token="tok", account_id=account.id, expires_at=datetime.now(UTC) + timedelta(days=1)
        )
        session.add(row)
        session.flush()
        session.refresh(row)
        assert row.created_at is not None

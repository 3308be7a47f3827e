"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates

EMAIL_MAX_LENGTH = 254
PASSWORD_MAX_LENGTH = 128
NAME_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 32


def _not_blank(value: str) -> None:
    if not value.strip():
        raise ValidationError("Must not be blank.")


class RegisterSchema(Schema):
    """
    Input payload for account registration.

    Unknown keys (``role`` included) are dropped, never honoured.
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=EMAIL_MAX_LENGTH))
    password = fields.String(required=True, validate=validate.Length(max=PASSWORD_MAX_LENGTH))
    first_name = fields.String(
        required=True,
        validate=[validate.Length(min=1, max=NAME_MAX_LENGTH), _not_blank],
    )
    last_name = fields.String(
        required=True,
        validate=[validate.Length(min=1, max=NAME_MAX_LENGTH), _not_blank],
    )
    phone = fields.String(
        load_default=None, allow_none=True, validate=validate.Length(max=PHONE_MAX_LENGTH)
    )

    def __init__(self, *, password_min_length: int = 8, **kwargs: Any) -> None:
        self._password_min_length = password_min_length
        super().__init__(**kwargs)

    @validates("password")
    def _password_long_enough(self, value: str, **_: Any) -> None:
        if len(value) < self._password_min_length:
            raise ValidationError(
                f"Password must be at least {self._password_min_length} characters."
            )


class LoginSchema(Schema):
    """Input payload for authenticating an account."""

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=EMAIL_MAX_LENGTH))
    password = fields.String(
        required=True, validate=validate.Length(min=1, max=PASSWORD_MAX_LENGTH)
    )


class RefreshSchema(Schema):
    """Input payload carrying a refresh token (refresh and logout)."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class AccountSummarySchema(Schema):
    """Public view of an account; never includes the password hash."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    phone = fields.String(allow_none=True)
    role = fields.String(required=True)
    email_verified = fields.Boolean()
    created_at = fields.DateTime(allow_none=True)
    last_login_at = fields.DateTime(allow_none=True)


class AuthResponseSchema(Schema):
    """Response payload for register and login."""

    user = fields.Nested(AccountSummarySchema, required=True)
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer(required=True)


class TokenResponseSchema(Schema):
    """Response payload for refresh; ``refresh_token`` only under rotation."""

    access_token = fields.String(required=True)
    refresh_token = fields.String()
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer(required=True)

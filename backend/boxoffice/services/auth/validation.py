"""Explicit input validation for the session manager operations.

Each ``validate_*`` function takes the raw JSON mapping and returns a
:class:`ValidationResult` holding either the DTO or the field errors. Nothing
here touches a store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from marshmallow import ValidationError

from boxoffice.schemas.auth import LoginSchema, RefreshSchema, RegisterSchema
from boxoffice.services._shared.errors import ValidationFailure
from boxoffice.services.auth.dto import LoginIn, RefreshIn, RegisterIn

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ValidationResult(Generic[T]):
    """
    Outcome of validating one input.

    :param value: The DTO when valid.
    :param errors: Field name -> messages when invalid.
    """

    value: T | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        """Return ``value`` or raise :class:`ValidationFailure`."""
        if self.errors or self.value is None:
            raise ValidationFailure(self.errors)
        return self.value


def _flatten(messages: Any) -> dict[str, list[str]]:
    if not isinstance(messages, dict):
        return {"_schema": [str(m) for m in messages]}
    out: dict[str, list[str]] = {}
    for key, value in messages.items():
        out[str(key)] = [str(v) for v in value] if isinstance(value, list) else [str(value)]
    return out


def _load(schema: Any, payload: Mapping[str, Any] | None) -> tuple[dict[str, Any], dict[str, list[str]]]:
    if not isinstance(payload, Mapping):
        return {}, {"_schema": ["Request body must be a JSON object."]}
    try:
        return schema.load(dict(payload)), {}
    except ValidationError as exc:
        return {}, _flatten(exc.normalized_messages())


def validate_register(
    payload: Mapping[str, Any] | None, *, password_min_length: int = 8
) -> ValidationResult[RegisterIn]:
    data, errors = _load(RegisterSchema(password_min_length=password_min_length), payload)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(
        value=RegisterIn(
            email=data["email"],
            password=data["password"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            phone=data.get("phone"),
        )
    )


def validate_login(payload: Mapping[str, Any] | None) -> ValidationResult[LoginIn]:
    data, errors = _load(LoginSchema(), payload)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=LoginIn(email=data["email"], password=data["password"]))


def validate_refresh(payload: Mapping[str, Any] | None) -> ValidationResult[RefreshIn]:
    data, errors = _load(RefreshSchema(), payload)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=RefreshIn(refresh_token=data["refresh_token"]))

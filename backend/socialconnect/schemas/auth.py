"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import ValidationError, fields, pre_load, validate, validates_schema

from .common import BaseSchema


class RegisterSchema(BaseSchema):
    """Input payload for account registration."""

    email = fields.Email(
        required=True,
        validate=validate.Length(max=254),
        error_messages={"invalid": "Invalid email format"},
    )
    username = fields.String(required=True)
    password = fields.String(required=True, validate=validate.Length(max=128))
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class LoginSchema(BaseSchema):
    """
    Input payload for authenticating a user.

    Accepts ``identifier`` or, for convenience, ``email`` / ``username``.
    """

    identifier = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @pre_load
    def fold_identifier(self, data: Any, **_: Any) -> Any:
        if isinstance(data, dict) and not data.get("identifier"):
            value = data.get("email") or data.get("username")
            if value:
                data = {**data, "identifier": value}
        return data


class RefreshSchema(BaseSchema):
    refresh_token = fields.String(
        required=True, error_messages={"required": "Refresh token is required"}
    )


class LogoutSchema(BaseSchema):
    refresh_token = fields.String(load_default=None)


class ChangePasswordSchema(BaseSchema):
    current_password = fields.String(required=True)
    new_password = fields.String(required=True, validate=validate.Length(max=128))

    @validates_schema
    def different(self, data: dict[str, Any], **_: Any) -> None:
        if data.get("current_password") == data.get("new_password"):
            raise ValidationError(
                "New password must differ from the current password", field_name="new_password"
            )


class PasswordResetRequestSchema(BaseSchema):
    email = fields.Email(required=True, error_messages={"invalid": "Invalid email format"})


class PasswordResetConfirmSchema(BaseSchema):
    email = fields.Email(required=True, error_messages={"invalid": "Invalid email format"})
    reset_token = fields.String(required=True)
    new_password = fields.String(required=True, validate=validate.Length(max=128))


class UsernameQuerySchema(BaseSchema):
    username = fields.String(
        required=True, error_messages={"required": "Username parameter is required"}
    )


class TokenResponseSchema(BaseSchema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")

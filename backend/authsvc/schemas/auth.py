"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, pre_load, validate


class _StripStrings(Schema):
    """Trim surrounding whitespace from string inputs (except passwords)."""

    @pre_load
    def _strip(self, data: Any, **_kwargs: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            key: value.strip() if isinstance(value, str) and key != "password" else value
            for key, value in data.items()
        }


class SignUpSchema(_StripStrings):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    name = fields.String(required=True, validate=validate.Length(min=3, max=100))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class SignInSchema(_StripStrings):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class SignUpResponseSchema(Schema):
    message = fields.String(required=True)
    user_id = fields.String(required=True)


class TokenResponseSchema(Schema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True)
    token_type = fields.String(load_default="bearer")
    expires_in = fields.Integer(required=True)

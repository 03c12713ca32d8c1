"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, pre_load

from .account import AccountSchema


class LoginSchema(Schema):
    """Input payload for authenticating; username or email plus password."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    password = fields.String(load_default=None, allow_none=True)


class RefreshSchema(Schema):
    """Body fallback for clients that cannot send the refresh cookie."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(load_default=None, allow_none=True)

    @pre_load
    def accept_camel_case(self, data: Any, **_: Any) -> Any:
        if isinstance(data, dict) and "refresh_token" not in data and "refreshToken" in data:
            data = {**data, "refresh_token": data["refreshToken"]}
        return data


class TokenPairSchema(Schema):
    """Response payload carrying both tokens."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class LoginResponseSchema(TokenPairSchema):
    """Response payload for a successful login."""

    account = fields.Nested(AccountSchema, required=True)

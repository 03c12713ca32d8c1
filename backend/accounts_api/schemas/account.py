"""Account resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class RegisterFormSchema(Schema):
    """Text parts of the multipart registration form.

    Fields are loaded leniently; presence and format rules belong to the
    registration service so the error messages stay in one place.
    """

    class Meta:
        unknown = EXCLUDE

    fullname = fields.String(load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    username = fields.String(load_default=None, allow_none=True)
    password = fields.String(load_default=None, allow_none=True)


class ChangePasswordSchema(Schema):
    """Input payload for changing the current password."""

    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(load_default=None, allow_none=True)
    new_password = fields.String(load_default=None, allow_none=True)


class AccountSchema(Schema):
    """Public representation of an account (no credentials)."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    fullname = fields.String(required=True)
    avatar = fields.String(required=True)
    cover_image = fields.String()
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)

"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

_PASSWORD = validate.Length(min=8, max=128)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=_PASSWORD)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class ForgotPasswordSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    password = fields.String(required=True, validate=_PASSWORD)


class ChangePasswordSchema(Schema):
    """Input payload for changing the password of the signed-in user."""

    current_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=_PASSWORD)


class OneTimeTokenQuerySchema(Schema):
    """Query string carrying a verification or reset token."""

    token = fields.String(required=True, validate=validate.Length(min=1, max=256))


class UserSchema(Schema):
    """Response payload exposing the public user fields."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    is_verified = fields.Boolean(required=True)
    role = fields.String(required=True)
    last_login_at = fields.DateTime(allow_none=True)


class RevokeSessionSchema(Schema):
    """Input payload for the admin session revocation endpoint."""

    credentials = fields.Boolean(load_default=False)

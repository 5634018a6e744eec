"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class TokenExchangeSchema(Schema):
    """Input payload exchanging a provider refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=4096))


class UserSchema(Schema):
    """Public representation of a user (never the hash)."""

    id = fields.UUID(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class AccessTokenSchema(Schema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class LoginResponseSchema(AccessTokenSchema):
    """Local login response: user, access token and refresh token."""

    refresh_token = fields.String(required=True)
    user = fields.Nested(UserSchema, required=True)


class RefreshTokenStatusSchema(Schema):
    """State of a refresh record; the opaque value is never echoed back."""

    user_id = fields.UUID(required=True)
    expires_at = fields.DateTime(required=True)
    revoked_at = fields.DateTime(allow_none=True)
    revoked = fields.Boolean()


class ExternalSessionSchema(Schema):
    """Provider session returned by external login and token exchange."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(allow_none=True)
    token_type = fields.Constant("bearer")
    email = fields.Email(required=True)
    user_id = fields.UUID(required=True)


class WhoAmISchema(Schema):
    """Identity resolved for the current request."""

    user_id = fields.UUID(required=True)
    email = fields.String(allow_none=True)
    mode = fields.String(required=True)

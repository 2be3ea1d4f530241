from marshmallow import fields, pre_load, validate, Schema

from models.schemas.common import InputSchema


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizing(InputSchema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class RegisterSchema(_EmailNormalizing):
    email = fields.Email(required=True)
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters"),
    )
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    handle = fields.String(
        required=True,
        validate=[
            validate.Length(min=3, max=30),
            validate.Regexp(r"^[a-zA-Z0-9_]+$", error="Handle: letters, numbers, underscore only"),
        ],
    )
    timezone = fields.String(load_default="UTC", validate=validate.Length(min=1, max=64))


class LoginSchema(_EmailNormalizing):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshSchema(InputSchema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class UserPublicSchema(Schema):
    id = fields.String()
    email = fields.String()
    name = fields.String()
    handle = fields.String()


class UserProfileSchema(UserPublicSchema):
    avatar_url = fields.String(data_key="avatarUrl", allow_none=True)
    timezone = fields.String()
    created_at = fields.DateTime(data_key="createdAt")

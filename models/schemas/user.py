from marshmallow import Schema, fields, pre_load, validates, ValidationError, EXCLUDE

from models.schemas.common import not_blank, strip_string


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=not_blank)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "email" in data:
            data["email"] = _norm_email(data["email"])
        if "username" in data:
            data["username"] = strip_string(data["username"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("Password must not be empty.")

    @validates("username")
    def validate_username(self, value, **kwargs):
        if len(value) > 64:
            raise ValidationError("Username must be at most 64 characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "username" in data:
            data["username"] = strip_string(data["username"])
        return data


class RefreshTokenSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, validate=not_blank)


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    avatar = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class TokenPairOutSchema(Schema):
    access_token = fields.String()
    refresh_token = fields.String()
    token_type = fields.Constant("bearer")
    user_id = fields.String()

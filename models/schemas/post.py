from marshmallow import Schema, fields, validate, EXCLUDE

from models.schemas.common import not_blank


class PostCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=[not_blank, validate.Length(max=255)])
    content = fields.String(allow_none=True)


class PostUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=[not_blank, validate.Length(max=255)])
    content = fields.String(allow_none=True)


class PostOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    content = fields.String(allow_none=True)
    media = fields.String(allow_none=True)
    user_id = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

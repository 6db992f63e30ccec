from marshmallow import Schema, fields, EXCLUDE

from models.schemas.common import not_blank


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank)
    post_id = fields.String(required=True, validate=not_blank)


class CommentUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=not_blank)


class CommentOutSchema(Schema):
    id = fields.String()
    content = fields.String()
    user_id = fields.String()
    post_id = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

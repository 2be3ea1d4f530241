from marshmallow import Schema, fields, validate

from models.journal import Pillar
from models.schemas.common import InputSchema, UserSummarySchema, date_field


class JournalCreateSchema(InputSchema):
    pillar = fields.Enum(Pillar, by_value=True, required=True)
    title = fields.String(allow_none=True, validate=validate.Length(max=200))
    content = fields.String(required=True, validate=validate.Length(min=1, max=10000))


class JournalQuerySchema(InputSchema):
    pillar = fields.Enum(Pillar, by_value=True)
    date = date_field()


class CommentCreateSchema(InputSchema):
    content = fields.String(required=True, validate=validate.Length(min=1, max=2000))


class CommentOutSchema(Schema):
    id = fields.String()
    journal_id = fields.String(data_key="journalId")
    user_id = fields.String(data_key="userId")
    content = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    user = fields.Nested(UserSummarySchema)


class JournalOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    circle_id = fields.String(data_key="circleId")
    pillar = fields.Enum(Pillar, by_value=True)
    title = fields.String(allow_none=True)
    content = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
    comment_count = fields.Method("get_comment_count", data_key="commentCount")

    def get_comment_count(self, obj):
        return len(obj.comments)


class JournalDetailSchema(JournalOutSchema):
    user = fields.Nested(UserSummarySchema)
    comments = fields.List(fields.Nested(CommentOutSchema))

from marshmallow import Schema, fields, validate

from models.schemas.common import InputSchema, UserSummarySchema


class ClipCreateSchema(InputSchema):
    video_url = fields.Url(required=True, data_key="videoUrl", error_messages={"invalid": "Must be a valid URL"})
    title = fields.String(allow_none=True, validate=validate.Length(max=200))
    caption = fields.String(allow_none=True, validate=validate.Length(max=1000))


class RotationUpdateSchema(InputSchema):
    interval_days = fields.Integer(data_key="intervalDays", strict=True, validate=validate.Range(min=1, max=14))


class ClipOutSchema(Schema):
    id = fields.String()
    circle_id = fields.String(data_key="circleId")
    posted_by_id = fields.String(data_key="postedById")
    video_url = fields.String(data_key="videoUrl")
    title = fields.String(allow_none=True)
    caption = fields.String(allow_none=True)
    is_active = fields.Boolean(data_key="isActive")
    created_at = fields.DateTime(data_key="createdAt")
    posted_by = fields.Nested(UserSummarySchema, data_key="postedBy")


class RotationOutSchema(Schema):
    id = fields.String()
    circle_id = fields.String(data_key="circleId")
    current_user_id = fields.String(data_key="currentUserId", allow_none=True)
    rotation_order = fields.List(fields.String(), data_key="rotationOrder")
    interval_days = fields.Integer(data_key="intervalDays")
    last_rotated_at = fields.DateTime(data_key="lastRotatedAt")

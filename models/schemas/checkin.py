from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from models.schemas.common import InputSchema, UserSummarySchema, date_field


class CheckInSchema(InputSchema):
    date = date_field(required=True)
    deen = fields.Boolean(load_default=False)
    body = fields.Boolean(load_default=False)
    mind = fields.Boolean(load_default=False)
    mission = fields.Boolean(load_default=False)
    brotherhood = fields.Boolean(load_default=False)
    note_private = fields.String(allow_none=True, data_key="notePrivate", validate=validate.Length(max=2000))


class DateQuerySchema(InputSchema):
    date = date_field()


class RangeQuerySchema(InputSchema):
    start = date_field(required=True)
    end = date_field(required=True)

    @validates_schema
    def _validate_order(self, data, **kwargs):
        if data.get("start") and data.get("end") and data["start"] > data["end"]:
            raise ValidationError("start must not be after end", field_name="start")


class CheckInOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    circle_id = fields.String(data_key="circleId")
    date = fields.String()
    score = fields.Integer()
    deen = fields.Boolean()
    body = fields.Boolean()
    mind = fields.Boolean()
    mission = fields.Boolean()
    brotherhood = fields.Boolean()
    note_private = fields.String(data_key="notePrivate", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class CircleCheckInOutSchema(CheckInOutSchema):
    user = fields.Nested(UserSummarySchema)

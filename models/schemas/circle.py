from marshmallow import Schema, fields, validate

from models.circle import VisibilityMode, MemberRole
from models.schemas.common import InputSchema, UserSummarySchema


class CircleCreateSchema(InputSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True, validate=validate.Length(max=500))
    visibility_mode = fields.Enum(VisibilityMode, by_value=True, data_key="visibilityMode")


class CircleUpdateSchema(CircleCreateSchema):
    # Same fields, all optional
    name = fields.String(validate=validate.Length(min=1, max=100))


class JoinCircleSchema(InputSchema):
    invite_code = fields.String(required=True, data_key="inviteCode", validate=validate.Length(min=1))


class MemberUpdateSchema(InputSchema):
    role = fields.Enum(
        MemberRole,
        by_value=True,
        required=True,
        validate=validate.OneOf([MemberRole.ADMIN, MemberRole.MEMBER]),
    )


class MemberOutSchema(Schema):
    id = fields.String()
    circle_id = fields.String(data_key="circleId")
    user_id = fields.String(data_key="userId")
    role = fields.Enum(MemberRole, by_value=True)
    joined_at = fields.DateTime(attribute="created_at", data_key="joinedAt")
    user = fields.Nested(UserSummarySchema)


class CircleOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    owner_id = fields.String(data_key="ownerId")
    invite_code = fields.String(data_key="inviteCode")
    visibility_mode = fields.Enum(VisibilityMode, by_value=True, data_key="visibilityMode")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class CircleDetailSchema(CircleOutSchema):
    members = fields.List(fields.Nested(MemberOutSchema(exclude=("circle_id",))))
    member_count = fields.Method("get_member_count", data_key="memberCount")

    def get_member_count(self, obj):
        return len(obj.members)

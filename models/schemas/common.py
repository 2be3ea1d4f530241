from datetime import date

from marshmallow import Schema, ValidationError, EXCLUDE, fields, validate

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def validate_calendar_date(value: str) -> None:
    """YYYY-MM-DD that is also a real calendar day."""
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD")


def date_field(**kwargs) -> fields.String:
    return fields.String(
        validate=[validate.Regexp(DATE_PATTERN, error="Date must be YYYY-MM-DD"), validate_calendar_date],
        **kwargs,
    )


class InputSchema(Schema):
    """Request bodies and query strings: unknown keys are dropped, not rejected."""

    class Meta:
        unknown = EXCLUDE


class UserSummarySchema(Schema):
    """How other users appear inside circle payloads."""
    id = fields.String()
    name = fields.String()
    handle = fields.String()
    avatar_url = fields.String(data_key="avatarUrl", allow_none=True)

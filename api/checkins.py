"""
Daily check-ins: one row per (user, circle, date), written as an upsert.
Private notes are only ever shown to their author.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify
from sqlalchemy.orm import selectinload

from models import storage
from models.base_model import utcnow
from models.checkin import DailyCheckIn
from models.user import User
from models.schemas.checkin import (
    CheckInSchema,
    DateQuerySchema,
    RangeQuerySchema,
    CheckInOutSchema,
    CircleCheckInOutSchema,
)
from utils.decorators import circle_member_required, CircleContext
from utils.pillars import PILLARS, compute_score, daily_averages

bp = Blueprint("checkins", __name__, url_prefix="/circles")

checkin_schema = CheckInSchema()
date_query_schema = DateQuerySchema()
range_query_schema = RangeQuerySchema()
checkin_out_schema = CheckInOutSchema()
checkins_out_schema = CheckInOutSchema(many=True)
circle_checkins_out_schema = CircleCheckInOutSchema(many=True)


def _for_viewer(check_ins, viewer_id: str) -> list[dict]:
    rows = circle_checkins_out_schema.dump(check_ins)
    for row in rows:
        if row["userId"] != viewer_id:
            row.pop("notePrivate", None)
    return rows


@bp.post("/<circle_id>/checkins")
@circle_member_required()
def upsert_checkin(circle_id: str, ctx: CircleContext):
    """
    Record (or overwrite) the caller's check-in for a day.
    ---
    tags:
      - Check-ins
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [date]
          properties:
            date: { type: string, example: "2024-05-01" }
            deen: { type: boolean }
            body: { type: boolean }
            mind: { type: boolean }
            mission: { type: boolean }
            brotherhood: { type: boolean }
            notePrivate: { type: string }
    responses:
      200: { description: Saved }
      400: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = checkin_schema.load(payload)

    session = storage.get_session()
    check_in = (
        session.query(DailyCheckIn)
        .filter(
            DailyCheckIn.user_id == ctx.user_id,
            DailyCheckIn.circle_id == circle_id,
            DailyCheckIn.date == data["date"],
        )
        .first()
    )
    if check_in is None:
        check_in = DailyCheckIn(user_id=ctx.user_id, circle_id=circle_id, date=data["date"])
        storage.new(check_in)

    for pillar in PILLARS:
        setattr(check_in, pillar, data[pillar])
    check_in.score = compute_score(data)
    check_in.note_private = data.get("note_private")
    storage.save()
    return jsonify({"checkIn": checkin_out_schema.dump(check_in)}), 200


@bp.get("/<circle_id>/checkins")
@circle_member_required()
def list_checkins(circle_id: str, ctx: CircleContext):
    """Everyone's check-ins for one day (default: today, UTC)."""
    query = date_query_schema.load(request.args)
    day = query.get("date") or utcnow().date().isoformat()

    session = storage.get_session()
    check_ins = (
        session.query(DailyCheckIn)
        .options(selectinload(DailyCheckIn.user))
        .filter(DailyCheckIn.circle_id == circle_id, DailyCheckIn.date == day)
        .all()
    )
    return jsonify({"date": day, "checkIns": _for_viewer(check_ins, ctx.user_id)})


@bp.get("/<circle_id>/checkins/range")
@circle_member_required()
def range_checkins(circle_id: str, ctx: CircleContext):
    """Check-ins between start and end (inclusive) plus per-day averages."""
    query = range_query_schema.load(request.args)
    start, end = query["start"], query["end"]

    session = storage.get_session()
    check_ins = (
        session.query(DailyCheckIn)
        .join(User, User.id == DailyCheckIn.user_id)
        .options(selectinload(DailyCheckIn.user))
        .filter(
            DailyCheckIn.circle_id == circle_id,
            DailyCheckIn.date >= start,
            DailyCheckIn.date <= end,
        )
        .order_by(DailyCheckIn.date.asc(), User.name.asc())
        .all()
    )
    return jsonify(
        {
            "start": start,
            "end": end,
            "checkIns": _for_viewer(check_ins, ctx.user_id),
            "dailyAverages": daily_averages(check_ins),
        }
    )


@bp.get("/<circle_id>/checkins/me")
@circle_member_required()
def my_checkins(circle_id: str, ctx: CircleContext):
    query = range_query_schema.load(request.args)

    session = storage.get_session()
    check_ins = (
        session.query(DailyCheckIn)
        .filter(
            DailyCheckIn.circle_id == circle_id,
            DailyCheckIn.user_id == ctx.user_id,
            DailyCheckIn.date >= query["start"],
            DailyCheckIn.date <= query["end"],
        )
        .order_by(DailyCheckIn.date.asc())
        .all()
    )
    return jsonify({"checkIns": checkins_out_schema.dump(check_ins)})

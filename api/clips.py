"""
Circle clips: one active video clip per circle, handed around the members
in a fixed round-robin order.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify
from sqlalchemy.orm import selectinload

from models import storage
from models.base_model import utcnow
from models.circle import CircleMember
from models.clip import CircleClip, ClipRotation
from models.schemas.clip import ClipCreateSchema, RotationUpdateSchema, ClipOutSchema, RotationOutSchema
from models.schemas.common import UserSummarySchema
from utils.decorators import circle_member_required, CircleContext
from utils.rotation import next_in_rotation, rotation_status

bp = Blueprint("clips", __name__, url_prefix="/circles")

HISTORY_LIMIT = 50
DEFAULT_INTERVAL_DAYS = 3

clip_create_schema = ClipCreateSchema()
rotation_update_schema = RotationUpdateSchema()
clip_out_schema = ClipOutSchema()
clips_out_schema = ClipOutSchema(many=True)
rotation_out_schema = RotationOutSchema()
user_summary_schema = UserSummarySchema()


def _rotation_for(session, circle_id: str) -> ClipRotation | None:
    return session.query(ClipRotation).filter(ClipRotation.circle_id == circle_id).first()


@bp.get("/<circle_id>/clips/current")
@circle_member_required()
def current_clip(circle_id: str, ctx: CircleContext):
    """Active clip (or null) and rotation info (or null if never set up)."""
    session = storage.get_session()
    clip = (
        session.query(CircleClip)
        .options(selectinload(CircleClip.posted_by))
        .filter(CircleClip.circle_id == circle_id, CircleClip.is_active.is_(True))
        .order_by(CircleClip.created_at.desc())
        .first()
    )
    rotation = _rotation_for(session, circle_id)
    rotation_info = None
    if rotation:
        rotation_info = rotation_status(rotation, ctx.user_id, utcnow())
        rotation_info["currentUser"] = (
            user_summary_schema.dump(rotation.current_user) if rotation.current_user else None
        )
    return jsonify(
        {
            "clip": clip_out_schema.dump(clip) if clip else None,
            "rotation": rotation_info,
        }
    )


@bp.get("/<circle_id>/clips")
@circle_member_required()
def clip_history(circle_id: str, ctx: CircleContext):
    session = storage.get_session()
    clips = (
        session.query(CircleClip)
        .options(selectinload(CircleClip.posted_by))
        .filter(CircleClip.circle_id == circle_id)
        .order_by(CircleClip.created_at.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )
    return jsonify({"clips": clips_out_schema.dump(clips)})


@bp.post("/<circle_id>/clips")
@circle_member_required()
def post_clip(circle_id: str, ctx: CircleContext):
    """
    Post a new clip. The previous active clip is retired and, if a rotation
    exists, the turn moves to whoever follows the poster.
    ---
    tags:
      - Clips
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [videoUrl]
          properties:
            videoUrl: { type: string, format: uri }
            title: { type: string }
            caption: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = clip_create_schema.load(payload)

    session = storage.get_session()
    session.query(CircleClip).filter(
        CircleClip.circle_id == circle_id, CircleClip.is_active.is_(True)
    ).update({CircleClip.is_active: False}, synchronize_session=False)

    clip = CircleClip(
        circle_id=circle_id,
        posted_by_id=ctx.user_id,
        video_url=data["video_url"],
        title=data.get("title"),
        caption=data.get("caption"),
        is_active=True,
    )
    storage.new(clip)

    rotation = _rotation_for(session, circle_id)
    if rotation and rotation.rotation_order:
        rotation.current_user_id = next_in_rotation(rotation.rotation_order, ctx.user_id)
        rotation.last_rotated_at = utcnow()

    storage.save()
    return jsonify({"clip": clip_out_schema.dump(clip)}), 201


@bp.post("/<circle_id>/clips/rotation")
@circle_member_required()
def setup_rotation(circle_id: str, ctx: CircleContext):
    """
    Create or refresh the rotation. The order is the circle's current members
    in join order; an existing rotation keeps its current member.
    """
    payload = request.get_json(silent=True) or {}
    data = rotation_update_schema.load(payload)

    session = storage.get_session()
    order = [
        user_id
        for (user_id,) in session.query(CircleMember.user_id)
        .filter(CircleMember.circle_id == circle_id)
        .order_by(CircleMember.created_at.asc())
        .all()
    ]

    rotation = _rotation_for(session, circle_id)
    if rotation is None:
        rotation = ClipRotation(
            circle_id=circle_id,
            current_user_id=order[0] if order else None,
            rotation_order=order,
            interval_days=data.get("interval_days") or DEFAULT_INTERVAL_DAYS,
            last_rotated_at=utcnow(),
        )
        storage.new(rotation)
    else:
        rotation.rotation_order = order
        if data.get("interval_days"):
            rotation.interval_days = data["interval_days"]

    storage.save()
    return jsonify({"message": "Rotation updated", "rotation": rotation_out_schema.dump(rotation)})

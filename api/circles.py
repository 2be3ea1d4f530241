"""
Circles blueprint: create/join/list circles, manage members and roles.
The creator of a circle is its only owner; the owner can't be demoted or removed.
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from models import storage
from models.circle import Circle, CircleMember, MemberRole, VisibilityMode
from models.schemas.circle import (
    CircleCreateSchema,
    CircleUpdateSchema,
    JoinCircleSchema,
    MemberUpdateSchema,
    MemberOutSchema,
    CircleOutSchema,
    CircleDetailSchema,
)
from utils.decorators import (
    auth_required,
    circle_member_required,
    circle_admin_required,
    circle_role_required,
    AuthContext,
    CircleContext,
)
from utils.security import generate_invite_code

logger = logging.getLogger(__name__)

bp = Blueprint("circles", __name__, url_prefix="/circles")

circle_create_schema = CircleCreateSchema()
circle_update_schema = CircleUpdateSchema()
join_schema = JoinCircleSchema()
member_update_schema = MemberUpdateSchema()
member_out_schema = MemberOutSchema()
members_out_schema = MemberOutSchema(many=True)
circle_out_schema = CircleOutSchema()
circle_detail_schema = CircleDetailSchema()


def _unique_invite_code(session) -> str:
    while True:
        code = generate_invite_code()
        if not session.query(Circle.id).filter(Circle.invite_code == code).first():
            return code


def _get_member(session, circle_id: str, member_id: str) -> CircleMember:
    member = session.get(CircleMember, member_id)
    if not member or member.circle_id != circle_id:
        abort(404, description="Member not found")
    return member


@bp.post("")
@auth_required()
def create_circle(ctx: AuthContext):
    """
    Create a circle; the caller becomes its owner.
    ---
    tags:
      - Circles
    security:
      - Bearer: []
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = circle_create_schema.load(payload)

    session = storage.get_session()
    circle = Circle(
        name=data["name"],
        description=data.get("description"),
        owner_id=ctx.user_id,
        invite_code=_unique_invite_code(session),
        visibility_mode=data.get("visibility_mode") or VisibilityMode.SCORE_ONLY,
    )
    circle.members.append(CircleMember(user_id=ctx.user_id, role=MemberRole.OWNER))
    storage.new(circle)
    storage.save()
    logger.info("User %s created circle %s", ctx.user_id, circle.id)
    return jsonify({"circle": circle_out_schema.dump(circle)}), 201


@bp.get("")
@auth_required()
def list_circles(ctx: AuthContext):
    """Circles the caller belongs to, with member count and the caller's role."""
    session = storage.get_session()
    counts = (
        session.query(CircleMember.circle_id, func.count(CircleMember.id).label("n"))
        .group_by(CircleMember.circle_id)
        .subquery()
    )
    rows = (
        session.query(CircleMember, Circle, counts.c.n)
        .join(Circle, Circle.id == CircleMember.circle_id)
        .join(counts, counts.c.circle_id == Circle.id)
        .filter(CircleMember.user_id == ctx.user_id)
        .order_by(Circle.created_at.asc())
        .all()
    )
    circles = [
        {**circle_out_schema.dump(circle), "memberCount": n, "myRole": MemberRole(m.role).value}
        for m, circle, n in rows
    ]
    return jsonify({"circles": circles})


@bp.post("/join")
@auth_required()
def join_circle(ctx: AuthContext):
    """
    Join a circle with an invite code.
    ---
    tags:
      - Circles
    security:
      - Bearer: []
    responses:
      201: { description: Joined }
      404: { description: Invalid invite code }
      409: { description: Already a member }
    """
    payload = request.get_json(silent=True) or {}
    data = join_schema.load(payload)

    session = storage.get_session()
    circle = session.query(Circle).filter(Circle.invite_code == data["invite_code"].strip().upper()).first()
    if not circle:
        abort(404, description="Invalid invite code")
    existing = (
        session.query(CircleMember)
        .filter(CircleMember.circle_id == circle.id, CircleMember.user_id == ctx.user_id)
        .first()
    )
    if existing:
        abort(409, description="Already a member of this circle")

    storage.new(CircleMember(circle_id=circle.id, user_id=ctx.user_id, role=MemberRole.MEMBER))
    storage.save()
    return jsonify({"message": "Joined circle", "circleId": circle.id, "circleName": circle.name}), 201


@bp.get("/<circle_id>")
@circle_member_required()
def get_circle(circle_id: str, ctx: CircleContext):
    session = storage.get_session()
    circle = (
        session.query(Circle)
        .options(selectinload(Circle.members).selectinload(CircleMember.user))
        .filter(Circle.id == circle_id)
        .first()
    )
    if not circle:
        abort(404, description="Circle not found")
    return jsonify({"circle": circle_detail_schema.dump(circle)})


@bp.patch("/<circle_id>")
@circle_admin_required()
def update_circle(circle_id: str, ctx: CircleContext):
    payload = request.get_json(silent=True) or {}
    data = circle_update_schema.load(payload)

    circle = storage.get(Circle, circle_id)
    if not circle:
        abort(404, description="Circle not found")
    if data.get("name"):
        circle.name = data["name"]
    if "description" in data:
        circle.description = data["description"]
    if data.get("visibility_mode"):
        circle.visibility_mode = data["visibility_mode"]
    storage.save()
    return jsonify({"circle": circle_out_schema.dump(circle)})


@bp.delete("/<circle_id>")
@circle_role_required([MemberRole.OWNER], description="Only the owner can delete the circle")
def delete_circle(circle_id: str, ctx: CircleContext):
    circle = storage.get(Circle, circle_id)
    if not circle:
        abort(404, description="Circle not found")
    storage.delete(circle)
    storage.save()
    logger.info("User %s deleted circle %s", ctx.user_id, circle_id)
    return jsonify({"message": "Circle deleted"})


@bp.post("/<circle_id>/invite")
@circle_admin_required()
def invite(circle_id: str, ctx: CircleContext):
    circle = storage.get(Circle, circle_id)
    if not circle:
        abort(404, description="Circle not found")
    return jsonify({"inviteCode": circle.invite_code})


@bp.get("/<circle_id>/members")
@circle_member_required()
def list_members(circle_id: str, ctx: CircleContext):
    session = storage.get_session()
    members = (
        session.query(CircleMember)
        .options(selectinload(CircleMember.user))
        .filter(CircleMember.circle_id == circle_id)
        .order_by(CircleMember.created_at.asc())
        .all()
    )
    return jsonify({"members": members_out_schema.dump(members)})


@bp.patch("/<circle_id>/members/<member_id>")
@circle_admin_required()
def update_member(circle_id: str, member_id: str, ctx: CircleContext):
    """
    Change a member's role (admin or member).
    ---
    tags:
      - Circles
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            role: { type: string, enum: [admin, member] }
    responses:
      200: { description: OK }
      403: { description: Not an admin, or target is the owner }
      404: { description: Member not found }
    """
    payload = request.get_json(silent=True) or {}
    data = member_update_schema.load(payload)

    session = storage.get_session()
    member = _get_member(session, circle_id, member_id)
    if member.role == MemberRole.OWNER:
        abort(403, description="The owner's role cannot be changed")
    member.role = data["role"]
    storage.save()
    return jsonify({"member": member_out_schema.dump(member)})


@bp.delete("/<circle_id>/members/<member_id>")
@circle_admin_required()
def remove_member(circle_id: str, member_id: str, ctx: CircleContext):
    session = storage.get_session()
    member = _get_member(session, circle_id, member_id)
    if member.role == MemberRole.OWNER:
        abort(403, description="The owner cannot be removed")
    storage.delete(member)
    storage.save()
    return jsonify({"message": "Member removed"})

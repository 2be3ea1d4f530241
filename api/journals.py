"""
Pillar journals: posts shared with a circle, each with a comment thread.
Only the author may delete a journal or a comment.
"""
from __future__ import annotations

import math
from datetime import datetime, time, timedelta
from typing import Tuple

from flask import Blueprint, request, jsonify, abort
from sqlalchemy.orm import selectinload

from models import storage
from models.journal import PillarJournal, JournalComment
from models.schemas.journal import (
    JournalCreateSchema,
    JournalQuerySchema,
    CommentCreateSchema,
    CommentOutSchema,
    JournalOutSchema,
    JournalDetailSchema,
)
from utils.decorators import circle_member_required, CircleContext

bp = Blueprint("journals", __name__, url_prefix="/circles")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

journal_create_schema = JournalCreateSchema()
journal_query_schema = JournalQuerySchema()
comment_create_schema = CommentCreateSchema()
comment_out_schema = CommentOutSchema()
journals_out_schema = JournalOutSchema(many=True)
journal_detail_schema = JournalDetailSchema()
journals_detail_schema = JournalDetailSchema(many=True)


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except ValueError:
        return default


def parse_pagination() -> Tuple[int, int]:
    """Unparseable or out-of-range values fall back to page 1, limit 20."""
    page = _int_arg("page", 1)
    limit = _int_arg("limit", DEFAULT_LIMIT)
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT)) if limit > 0 else DEFAULT_LIMIT
    return page, limit


def _with_thread(query):
    return query.options(
        selectinload(PillarJournal.user),
        selectinload(PillarJournal.comments).selectinload(JournalComment.user),
    )


def _journal_in_circle(session, circle_id: str, journal_id: str) -> PillarJournal:
    journal = _with_thread(session.query(PillarJournal)).filter(PillarJournal.id == journal_id).first()
    if not journal or journal.circle_id != circle_id:
        abort(404, description="Journal not found")
    return journal


@bp.post("/<circle_id>/journals")
@circle_member_required()
def create_journal(circle_id: str, ctx: CircleContext):
    """
    Share a journal entry with the circle.
    ---
    tags:
      - Journals
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [pillar, content]
          properties:
            pillar: { type: string, enum: [deen, body, mind, mission, brotherhood] }
            title: { type: string }
            content: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    payload = request.get_json(silent=True) or {}
    data = journal_create_schema.load(payload)

    journal = PillarJournal(
        user_id=ctx.user_id,
        circle_id=circle_id,
        pillar=data["pillar"],
        title=data.get("title"),
        content=data["content"],
    )
    storage.new(journal)
    storage.save()
    return jsonify({"journal": journal_detail_schema.dump(journal)}), 201


@bp.get("/<circle_id>/journals")
@circle_member_required()
def journal_feed(circle_id: str, ctx: CircleContext):
    """All members' journals, newest first, optionally for one pillar."""
    query_args = journal_query_schema.load(request.args)
    page, limit = parse_pagination()

    session = storage.get_session()
    query = session.query(PillarJournal).filter(PillarJournal.circle_id == circle_id)
    if query_args.get("pillar"):
        query = query.filter(PillarJournal.pillar == query_args["pillar"])

    total = query.count()
    rows = (
        _with_thread(query)
        .order_by(PillarJournal.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "journals": journals_detail_schema.dump(rows),
            "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
        }
    )


@bp.get("/<circle_id>/journals/me")
@circle_member_required()
def my_journals(circle_id: str, ctx: CircleContext):
    """The caller's own journals in this circle; ?date= limits to one UTC day."""
    query_args = journal_query_schema.load(request.args)

    session = storage.get_session()
    query = (
        session.query(PillarJournal)
        .options(selectinload(PillarJournal.comments))
        .filter(PillarJournal.circle_id == circle_id, PillarJournal.user_id == ctx.user_id)
    )
    if query_args.get("pillar"):
        query = query.filter(PillarJournal.pillar == query_args["pillar"])
    if query_args.get("date"):
        start = datetime.combine(datetime.fromisoformat(query_args["date"]).date(), time.min)
        query = query.filter(
            PillarJournal.created_at >= start,
            PillarJournal.created_at < start + timedelta(days=1),
        )
    rows = query.order_by(PillarJournal.created_at.desc()).all()
    return jsonify({"journals": journals_out_schema.dump(rows)})


@bp.get("/<circle_id>/journals/<journal_id>")
@circle_member_required()
def get_journal(circle_id: str, journal_id: str, ctx: CircleContext):
    session = storage.get_session()
    journal = _journal_in_circle(session, circle_id, journal_id)
    return jsonify({"journal": journal_detail_schema.dump(journal)})


@bp.delete("/<circle_id>/journals/<journal_id>")
@circle_member_required()
def delete_journal(circle_id: str, journal_id: str, ctx: CircleContext):
    session = storage.get_session()
    journal = session.get(PillarJournal, journal_id)
    # someone else's journal is reported as missing
    if not journal or journal.circle_id != circle_id or journal.user_id != ctx.user_id:
        abort(404, description="Journal not found")
    storage.delete(journal)
    storage.save()
    return jsonify({"message": "Journal deleted"})


@bp.post("/<circle_id>/journals/<journal_id>/comments")
@circle_member_required()
def add_comment(circle_id: str, journal_id: str, ctx: CircleContext):
    payload = request.get_json(silent=True) or {}
    data = comment_create_schema.load(payload)

    session = storage.get_session()
    journal = session.get(PillarJournal, journal_id)
    if not journal or journal.circle_id != circle_id:
        abort(404, description="Journal not found")

    comment = JournalComment(journal_id=journal.id, user_id=ctx.user_id, content=data["content"])
    storage.new(comment)
    storage.save()
    return jsonify({"comment": comment_out_schema.dump(comment)}), 201


@bp.delete("/<circle_id>/journals/<journal_id>/comments/<comment_id>")
@circle_member_required()
def delete_comment(circle_id: str, journal_id: str, comment_id: str, ctx: CircleContext):
    session = storage.get_session()
    comment = session.get(JournalComment, comment_id)
    if not comment or comment.journal_id != journal_id or comment.user_id != ctx.user_id:
        abort(404, description="Comment not found")
    journal = session.get(PillarJournal, journal_id)
    if not journal or journal.circle_id != circle_id:
        abort(404, description="Comment not found")
    storage.delete(comment)
    storage.save()
    return jsonify({"message": "Comment deleted"})

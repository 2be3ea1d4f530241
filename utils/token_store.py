"""
Refresh token store.

Only sha256(raw_token) is persisted. Consumption is a single
DELETE ... RETURNING statement, so when several requests present the same
raw token at once the database decides which one gets the row; every other
caller sees "not found".
"""
from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import Row, delete

from models import storage
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from utils.security import hash_token

logger = logging.getLogger(__name__)


def issue_refresh_token(user_id: str, raw_token: str, session=None) -> RefreshToken:
    """Store the hash of raw_token for user_id with a fresh expiry and commit."""
    if session is None:
        session = storage.get_session()
    record = RefreshToken(
        token_hash=hash_token(raw_token),
        user_id=user_id,
        expires_at=utcnow() + current_app.config["REFRESH_TOKEN_EXPIRES"],
    )
    session.add(record)
    session.commit()
    return record


def consume_refresh_token(raw_token: str, session=None) -> Row | None:
    """
    Delete the live record matching raw_token and return its (id, user_id, expires_at).

    Returns None when there is no such row (already used, revoked, forged) or
    when the row had expired; an expired row is deleted all the same.
    """
    if session is None:
        session = storage.get_session()
    stmt = (
        delete(RefreshToken)
        .where(RefreshToken.token_hash == hash_token(raw_token))
        .returning(RefreshToken.id, RefreshToken.user_id, RefreshToken.expires_at)
    )
    row = session.execute(stmt).first()
    session.commit()
    if row is None:
        return None
    if row.expires_at <= utcnow():
        logger.info("Discarded expired refresh token for user %s", row.user_id)
        return None
    return row


def revoke_refresh_tokens(user_id: str, session=None) -> int:
    """Delete every refresh token of user_id; returns how many were removed."""
    if session is None:
        session = storage.get_session()
    result = session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    session.commit()
    return result.rowcount

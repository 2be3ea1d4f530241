"""
Session lifecycle: register, login, refresh, logout, me.

There is no session table. A user has an active session for as long as
one of their refresh tokens is still stored; access tokens are never
tracked server-side and simply run out.

Failures are raised as werkzeug HTTP exceptions via abort(), like the
route handlers do, so callers outside a request get the same taxonomy.
"""
from __future__ import annotations

import logging

from flask import abort
from sqlalchemy import or_

from models import storage
from models.user import User
from models.schemas.user import UserPublicSchema, UserProfileSchema
from utils.security import (
    TokenPayload,
    InvalidToken,
    REFRESH,
    hash_password,
    verify_password,
    sign_access_token,
    sign_refresh_token,
    decode_token,
)
from utils.token_store import issue_refresh_token, consume_refresh_token, revoke_refresh_tokens

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH = "Invalid or expired refresh token"

user_public_schema = UserPublicSchema()
user_profile_schema = UserProfileSchema()


def _issue_tokens(payload: TokenPayload) -> dict:
    access_token = sign_access_token(payload)
    refresh_token = sign_refresh_token(payload)
    issue_refresh_token(payload.user_id, refresh_token)
    return {"accessToken": access_token, "refreshToken": refresh_token}


def _token_response(user: User) -> dict:
    tokens = _issue_tokens(TokenPayload(user_id=user.id, email=user.email))
    return {"user": user_public_schema.dump(user), **tokens}


def register(email: str, password: str, name: str, handle: str, timezone: str = "UTC") -> dict:
    """
    Create a user and open their first session.
    Conflict (409) if the email or handle is taken; an email collision wins.
    """
    session = storage.get_session()
    existing = session.query(User).filter(or_(User.email == email, User.handle == handle)).all()
    if any(u.email == email for u in existing):
        abort(409, description="Email already registered")
    if existing:
        abort(409, description="Handle already taken")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        handle=handle,
        timezone=timezone or "UTC",
    )
    storage.new(user)
    storage.save()
    logger.info("Registered user %s", user.id)
    return _token_response(user)


def login(email: str, password: str) -> dict:
    """Unknown email and wrong password fail identically."""
    session = storage.get_session()
    user = session.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        abort(401, description=INVALID_CREDENTIALS)
    return _token_response(user)


def refresh(raw_refresh_token: str) -> dict:
    """
    Exchange a refresh token for a new access/refresh pair.
    The presented token is consumed whether or not anything after it succeeds.
    """
    try:
        payload = decode_token(raw_refresh_token, expected_type=REFRESH)
    except InvalidToken as exc:
        logger.info("Refresh rejected: %s", exc)
        abort(401, description=INVALID_REFRESH)

    record = consume_refresh_token(raw_refresh_token)
    if record is None or record.user_id != payload.user_id:
        logger.warning("Refresh rejected: no live record for user %s", payload.user_id)
        abort(401, description=INVALID_REFRESH)
    return _issue_tokens(payload)


def logout(user_id: str) -> int:
    """Revoke every refresh token of the user. Idempotent."""
    revoked = revoke_refresh_tokens(user_id)
    logger.info("Logged out user %s (%d refresh tokens revoked)", user_id, revoked)
    return revoked


def me(user_id: str) -> dict:
    user = storage.get(User, user_id)
    if not user:
        abort(404, description="User not found")
    return user_profile_schema.dump(user)

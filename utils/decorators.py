"""
Authorization decorators for Flask views.

auth_required            -> bearer token, passes ctx=AuthContext
circle_member_required   -> auth + membership, passes ctx=CircleContext
circle_role_required     -> auth + membership + role check, passes ctx=CircleContext

The role check is only available bundled with membership resolution, so
it can never run without the role it inspects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps

from flask import request, abort

from models import storage
from models.circle import CircleMember, MemberRole
from utils.security import decode_token, InvalidToken, ACCESS

logger = logging.getLogger(__name__)

ADMIN_ROLES = (MemberRole.OWNER, MemberRole.ADMIN)


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    email: str


@dataclass(frozen=True)
class CircleContext(AuthContext):
    circle_id: str
    role: MemberRole


def authenticate() -> AuthContext:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        abort(401, description="Missing or invalid Authorization header")
    token = auth[len("Bearer "):].strip()
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except InvalidToken as exc:
        # expired and invalid look the same to the client
        logger.debug("Rejected access token: %s", exc)
        abort(401, description="Invalid or expired token")
    return AuthContext(user_id=payload.user_id, email=payload.email)


def resolve_membership(auth: AuthContext, circle_id: str | None) -> CircleContext:
    if not circle_id:
        abort(400, description="Circle ID required")
    session = storage.get_session()
    membership = (
        session.query(CircleMember)
        .filter(CircleMember.circle_id == circle_id, CircleMember.user_id == auth.user_id)
        .first()
    )
    if not membership:
        abort(403, description="Not a member of this circle")
    return CircleContext(
        user_id=auth.user_id,
        email=auth.email,
        circle_id=circle_id,
        role=MemberRole(membership.role),
    )


def auth_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            ctx = authenticate()
            return fn(*args, ctx=ctx, **kwargs)

        return wrapper

    return decorator


def circle_member_required():
    """The circle id comes from the <circle_id> URL variable."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = authenticate()
            ctx = resolve_membership(auth, kwargs.get("circle_id"))
            return fn(*args, ctx=ctx, **kwargs)

        return wrapper

    return decorator


def circle_role_required(roles, description: str = "Admin or owner role required"):
    """
    Allow access only if the caller's role in the circle is one of roles.
    Membership is resolved first, in the same request.
    """
    allowed = {MemberRole(r) for r in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = authenticate()
            ctx = resolve_membership(auth, kwargs.get("circle_id"))
            if ctx.role not in allowed:
                abort(403, description=description)
            return fn(*args, ctx=ctx, **kwargs)

        return wrapper

    return decorator


def circle_admin_required():
    return circle_role_required(ADMIN_ROLES)

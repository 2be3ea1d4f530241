"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI / invite code generation
"""
from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from flask import current_app

# Fixed cost parameters; changing them only affects newly created hashes
ph = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4)

ACCESS = "access"
REFRESH = "refresh"


class InvalidToken(Exception):
    """Token is malformed, has a bad signature, or is the wrong type."""


class ExpiredToken(InvalidToken):
    """Token signature is fine but its exp claim has passed."""


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2 (salt embedded in the result)
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password using argon2.

    A wrong password returns False; a malformed hash raises
    argon2.exceptions.InvalidHashError.
    """
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False


def hash_token(raw_token: str) -> str:
    """sha256 hex digest used to store refresh tokens."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def generate_invite_code() -> str:
    """8 uppercase hex characters, e.g. '9F3A0C1B'."""
    return secrets.token_hex(4).upper()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sign(payload: TokenPayload, token_type: str, lifetime: timedelta) -> str:
    now = _now()
    claims = {
        "iss": current_app.config.get("JWT_ISSUER", "sahwa-api"),
        "sub": str(payload.user_id),
        "email": payload.email,
        "type": token_type,
        # jti keeps two tokens minted in the same second for the same user distinct
        "jti": generate_jti(),
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(claims, current_app.config["JWT_SECRET"], algorithm=current_app.config["JWT_ALGORITHM"])


def sign_access_token(payload: TokenPayload, expires_delta: timedelta | None = None) -> str:
    return _sign(payload, ACCESS, expires_delta or current_app.config["ACCESS_TOKEN_EXPIRES"])


def sign_refresh_token(payload: TokenPayload, expires_delta: timedelta | None = None) -> str:
    return _sign(payload, REFRESH, expires_delta or current_app.config["REFRESH_TOKEN_EXPIRES"])


def decode_token(token: str, expected_type: str = ACCESS) -> TokenPayload:
    """
    Verify a token and return its identity claims.
    expected_type must be "access" or "refresh".
    Raises ExpiredToken when exp has passed, InvalidToken for anything else.
    """
    try:
        decoded = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            issuer=current_app.config.get("JWT_ISSUER", "sahwa-api"),
            options={"require": ["exp", "sub", "type"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken(f"Invalid token: {exc}") from exc

    if decoded.get("type") != expected_type:
        raise InvalidToken("Wrong token type")
    return TokenPayload(user_id=decoded["sub"], email=decoded.get("email", ""))

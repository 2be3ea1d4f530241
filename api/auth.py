"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256)
- Stores sha256 hashes of refresh tokens so they can be rotated (single use) and revoked
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.schemas.user import RegisterSchema, LoginSchema, RefreshSchema
from utils import sessions
from utils.decorators import auth_required, AuthContext

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()


@bp.post("/register")
def register():
    """
    Register a new user and open a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password, name, handle]
          properties:
            email: { type: string }
            password: { type: string, minLength: 8 }
            name: { type: string }
            handle: { type: string, pattern: "^[a-zA-Z0-9_]+$" }
            timezone: { type: string, default: UTC }
    responses:
      201:
        description: Created (user, accessToken, refreshToken)
      400:
        description: Validation error
      409:
        description: Email already registered / Handle already taken
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)
    return jsonify(sessions.register(**data)), 201


@bp.post("/login")
def login():
    """
    Login: return user, accessToken and refreshToken
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid email or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)
    return jsonify(sessions.login(data["email"], data["password"])), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain new access and refresh tokens (rotation).
    The presented refresh token can never be used again.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (accessToken, refreshToken)
      401:
        description: Invalid or expired refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)
    return jsonify(sessions.refresh(data["refresh_token"])), 200


@bp.post("/logout")
@auth_required()
def logout(ctx: AuthContext):
    """
    Logout: revokes every refresh token of the caller.
    Access tokens stay valid until they expire.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    sessions.logout(ctx.user_id)
    return jsonify({"message": "Logged out"}), 200


@bp.get("/me")
@auth_required()
def me(ctx: AuthContext):
    """
    Get current user profile
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: User not found
    """
    return jsonify({"user": sessions.me(ctx.user_id)}), 200

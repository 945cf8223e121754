"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Access tokens are returned in the JSON body; the refresh token only ever
travels in an HttpOnly, Secure, SameSite=Strict cookie.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import TokenOutSchema, UserCreateSchema, UserLoginSchema, UserOutSchema
from services.session_manager import SessionManager, TokenPair
from utils.decorators import jwt_required
from utils.exceptions import AuthError

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()
token_out_schema = TokenOutSchema()


def _sessions() -> SessionManager:
    return current_app.extensions["session_manager"]


def _token_response(pair: TokenPair):
    # the refresh token is not a schema field; it only travels in the cookie
    response = jsonify(token_out_schema.dump(pair))
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        pair.refresh_token,
        max_age=pair.refresh_expires_in,
        path="/",
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        httponly=True,
        samesite="Strict",
    )
    return response


@bp.post("/register")
def register():
    """
    Register a new user.
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
          properties:
            email: { type: string }
            password: { type: string, minLength: 8 }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      409:
        description: Email already exists
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)
    user = _sessions().register(data["email"], data["password"])
    return jsonify(user_out_schema.dump(user)), 201


@bp.post("/login")
def login():
    """
    Login: returns an access token and sets the refresh-token cookie
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
        description: OK (returns access token, sets refresh cookie)
      400:
        description: Validation error
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    pair = _sessions().login(data["email"], data["password"])
    return _token_response(pair), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange the refresh-token cookie for a new token pair (rotation)
    ---
    tags:
      - Auth
    responses:
      200:
        description: Token refreshed, cookie rotated
      401:
        description: Invalid or expired refresh token
    """
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not token:
        raise AuthError("missing refresh token")
    pair = _sessions().refresh(token)
    return _token_response(pair), 200


@bp.post("/logout")
def logout():
    """
    Logout: revokes the refresh token from the cookie (if any) and clears it
    ---
    tags:
      - Auth
    responses:
      204:
        description: Logged out
    """
    _sessions().logout(request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]))
    response = current_app.response_class(status=204)
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        path="/",
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        httponly=True,
        samesite="Strict",
    )
    return response


@bp.get("/me")
@jwt_required()
def me():
    """
    Current user, straight from the verified access-token claims
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
    """
    return jsonify({"id": g.claims["sub"], "email": g.claims["email"]}), 200

"""
Authentication blueprint (mounted under /users):
- POST /users/register
- POST /users/login
- POST /users/refresh-token
- POST /users/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and single-use refresh tokens (HS256 JWTs)
- Keeps every live refresh token in the user_tokens table; rotation consumes
  the presented one and reuse of a consumed one revokes them all (utils.sessions)
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, abort

from models import storage
from models.user import User
from models.schemas.common import load_payload
from models.schemas.user import (
    UserCreateSchema,
    UserOutSchema,
    UserLoginSchema,
    RefreshTokenSchema,
    TokenPairOutSchema,
)
from utils import sessions
from utils.exceptions import Conflict, MissingCredential
from utils.security import hash_password, verify_password
from api.uploads import AVATARS, check_image, remove_image, save_image

bp = Blueprint("auth", __name__)

logger = logging.getLogger(__name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
refresh_token_schema = RefreshTokenSchema()
token_pair_schema = TokenPairOutSchema()


def _token_response(user_id: str, pair: sessions.TokenPair):
    return jsonify(
        token_pair_schema.dump(
            {
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
                "user_id": user_id,
            }
        )
    ), 200


@bp.post("/register")
def register():
    """
    Register a new user
    ---
    tags:
      - Users
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: username
        type: string
        required: true
      - in: formData
        name: password
        type: string
        required: true
      - in: formData
        name: email
        type: string
        required: true
      - in: formData
        name: avatar
        type: file
        required: true
        description: png or jpeg
    responses:
      201:
        description: Created
      400:
        description: Missing arguments / bad avatar file format
      409:
        description: Username taken
    """
    avatar = request.files.get("avatar")
    data = load_payload(user_create_schema, request.form.to_dict())
    if avatar is None or not avatar.filename:
        raise MissingCredential("Missing Arguments: avatar")
    check_image(avatar)

    if storage.get_user_by_username(data["username"]) is not None:
        raise Conflict("Username Taken")

    avatar_path = save_image(avatar, AVATARS)
    try:
        user = User(
            username=data["username"],
            email=data["email"],
            password_hash=hash_password(data["password"]),
            avatar=avatar_path,
        )
        storage.new(user)
        storage.save()
    except Exception:
        remove_image(avatar_path)
        raise

    logger.info("Registered user %s", user.id)
    return jsonify({"data": user_out_schema.dump(user)}), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [username, password]
           properties:
             username: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing arguments
      401:
        description: Authentication failed
    """
    data = load_payload(user_login_schema, request.get_json(silent=True))

    user = storage.get_user_by_username(data["username"])
    if user is None or not verify_password(data["password"], user.password_hash):
        abort(401, description="Authentication failed")

    pair = sessions.start_session(user.id)
    logger.info("User %s logged in", user.id)
    return _token_response(user.id, pair)


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token for a new token pair (rotation).
    Reusing an already rotated refresh token revokes every session of its user.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: New token pair
      400:
        description: Missing arguments
      403:
        description: Invalid, expired or reused refresh token
    """
    data = load_payload(refresh_token_schema, request.get_json(silent=True))
    user, pair = sessions.refresh_session(data["refresh_token"])
    return _token_response(user.id, pair)


@bp.post("/logout")
def logout():
    """
    Logout: ends the session of the given refresh token
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: Missing arguments
      403:
        description: Invalid refresh token
    """
    data = load_payload(refresh_token_schema, request.get_json(silent=True))
    sessions.logout(data["refresh_token"])
    return jsonify({"message": "Logged out"}), 200

from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.user import User
from models.schemas.common import load_payload
from models.schemas.user import UserUpdateSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import Conflict, MissingCredential
from api.uploads import AVATARS, check_image, remove_image, save_image

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()


def _current_user() -> User:
    user = storage.get(User, g.current_user_id)
    if user is None:
        abort(404, description="User not found")
    return user


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user info
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing token
      403:
        description: Invalid token
    """
    return jsonify({"data": user_out_schema.dump(_current_user())}), 200


@bp.put("/users")
@jwt_required()
def update_user():
    """
    Update the current user's username and/or avatar
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: username
        type: string
        description: New username
      - in: formData
        name: avatar
        type: file
        description: New avatar (png or jpeg)
    responses:
      200:
        description: Updated user
      400:
        description: Missing arguments / bad avatar file format
      401:
        description: Not authenticated
      409:
        description: Username taken
    """
    avatar = request.files.get("avatar")
    if avatar is not None and not avatar.filename:
        avatar = None
    payload = request.form.to_dict() or (request.get_json(silent=True) or {})
    data = load_payload(user_update_schema, payload)

    if "username" not in data and avatar is None:
        raise MissingCredential("Missing Arguments: username or avatar")
    check_image(avatar)

    user = _current_user()

    if "username" in data and data["username"] != user.username:
        if storage.get_user_by_username(data["username"]) is not None:
            raise Conflict("Username Taken")
        user.username = data["username"]

    old_avatar = user.avatar
    new_avatar = save_image(avatar, AVATARS) if avatar is not None else None
    try:
        if new_avatar:
            user.avatar = new_avatar
        user.save()
    except Exception:
        remove_image(new_avatar)
        raise

    if new_avatar:
        remove_image(old_avatar)

    return jsonify({"data": user_out_schema.dump(user)}), 200

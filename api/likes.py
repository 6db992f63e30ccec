from __future__ import annotations

from flask import Blueprint, jsonify, abort, g

from models import storage
from models.like import Like
from models.post import Post
from utils.decorators import jwt_required

bp = Blueprint("likes", __name__)


def _like_count(post_id: str) -> int:
    return storage.get_session().query(Like).filter(Like.post_id == post_id).count()


@bp.get("/likes/<post_id>")
@jwt_required()
def get_like(post_id: str):
    """
    Whether the current user liked the post, and its like count
    ---
    tags: [Likes]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200:
        description: OK
        schema:
          type: object
          properties:
            data:
              type: object
              properties:
                liked: { type: boolean }
                count: { type: integer }
    """
    like = storage.get(Like, (g.current_user_id, post_id))
    return jsonify({"data": {"liked": like is not None, "count": _like_count(post_id)}})


@bp.post("/likes/<post_id>")
@jwt_required()
def like_post(post_id: str):
    """
    Like a post
    ---
    tags: [Likes]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      201: { description: Liked }
      404: { description: Post not found }
      409: { description: Post already liked }
    """
    if storage.get(Post, post_id) is None:
        abort(404, description="Post not found")
    if storage.get(Like, (g.current_user_id, post_id)) is not None:
        abort(409, description="Post Already Liked")

    storage.new(Like(user_id=g.current_user_id, post_id=post_id))
    storage.save()
    return jsonify({"data": {"liked": True, "count": _like_count(post_id)}}), 201


@bp.delete("/likes/<post_id>")
@jwt_required()
def unlike_post(post_id: str):
    """
    Remove the current user's like
    ---
    tags: [Likes]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: Unliked }
      404: { description: Not liked }
    """
    like = storage.get(Like, (g.current_user_id, post_id))
    if like is None:
        abort(404, description="Not Found")
    storage.delete(like)
    storage.save()
    return jsonify({"data": {"liked": False, "count": _like_count(post_id)}})

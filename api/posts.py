from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, g
from sqlalchemy import or_, and_

from models import storage
from models.post import Post
from models.comment import Comment
from models.like import Like
from models.schemas.common import load_payload
from models.schemas.post import PostCreateSchema, PostUpdateSchema, PostOutSchema
from utils.decorators import jwt_required
from api.uploads import MEDIA, check_image, remove_image, save_image

bp = Blueprint("posts", __name__)

# Schemas
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()
post_out_schema = PostOutSchema()
posts_out_schema = PostOutSchema(many=True)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_limit() -> int:
    try:
        limit = int(request.args.get("limit", str(DEFAULT_LIMIT)))
    except ValueError:
        abort(400, description="limit must be an integer")
    return max(1, min(limit, MAX_LIMIT))


def apply_cursor(query, last_id: str | None):
    """Keyset pagination: rows strictly after last_id in (created_at, id) order."""
    if not last_id:
        return query
    last = storage.get(Post, last_id)
    if last is None:
        abort(400, description="last_id does not match any post")
    return query.filter(
        or_(
            Post.created_at > last.created_at,
            and_(Post.created_at == last.created_at, Post.id > last.id),
        )
    )


def get_post_or_404(post_id: str) -> Post:
    post = storage.get(Post, post_id)
    if post is None:
        abort(404, description="Post not found")
    return post


def ensure_owner(post: Post) -> None:
    if post.user_id != g.current_user_id:
        abort(403, description="Only the author can change this post")


def _media_file():
    media = request.files.get("media")
    if media is not None and not media.filename:
        return None
    return media


@bp.get("/posts")
@jwt_required()
def list_posts():
    """
    List posts, oldest first, with cursor pagination
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: query
        name: user_id
        type: string
        description: Only posts of this user
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: last_id
        type: string
        description: Id of the last post already seen (not included)
    responses:
      200:
        description: List of posts
      401:
        description: Not authenticated
    """
    session = storage.get_session()
    limit = parse_limit()
    user_id = request.args.get("user_id")
    last_id = request.args.get("last_id")

    query = session.query(Post)
    if user_id:
        query = query.filter(Post.user_id == user_id)
    query = apply_cursor(query, last_id)
    rows = query.order_by(Post.created_at.asc(), Post.id.asc()).limit(limit).all()

    return jsonify(
        {
            "data": posts_out_schema.dump(rows),
            "meta": {
                "limit": limit,
                "last_id": rows[-1].id if rows else None,
                "filters": {k: v for k, v in request.args.items()},
            },
        }
    )


@bp.get("/posts/<post_id>")
@jwt_required()
def get_post(post_id: str):
    """
    Get a single post by id
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200:
        description: Post found
      404:
        description: Not found
    """
    return jsonify({"data": post_out_schema.dump(get_post_or_404(post_id))})


@bp.post("/posts")
@jwt_required()
def create_post():
    """
    Create a new post
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: title
        type: string
        required: true
      - in: formData
        name: content
        type: string
      - in: formData
        name: media
        type: file
        description: png or jpeg
    responses:
      201:
        description: Created
      400:
        description: Missing arguments / bad media file format
      401:
        description: Not authenticated
    """
    media = _media_file()
    payload = request.form.to_dict() or (request.get_json(silent=True) or {})
    data = load_payload(post_create_schema, payload)
    check_image(media)

    media_path = save_image(media, MEDIA) if media is not None else None
    try:
        post = Post(
            title=data["title"],
            content=data.get("content"),
            media=media_path,
            user_id=g.current_user_id,
        )
        storage.new(post)
        storage.save()
    except Exception:
        remove_image(media_path)
        raise

    return jsonify({"data": post_out_schema.dump(post)}), 201


@bp.put("/posts/<post_id>")
@jwt_required()
def update_post(post_id: str):
    """
    Update a post (partial)
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
      - in: formData
        name: title
        type: string
      - in: formData
        name: content
        type: string
      - in: formData
        name: media
        type: file
    responses:
      200:
        description: Updated
      400:
        description: Bad media file format
      403:
        description: Not the author
      404:
        description: Not found
    """
    post = get_post_or_404(post_id)
    ensure_owner(post)

    media = _media_file()
    payload = request.form.to_dict() or (request.get_json(silent=True) or {})
    data = load_payload(post_update_schema, payload)
    check_image(media)

    for field in ["title", "content"]:
        if field in data:
            setattr(post, field, data[field])

    old_media = post.media
    new_media = save_image(media, MEDIA) if media is not None else None
    try:
        if new_media:
            post.media = new_media
        post.save()
    except Exception:
        remove_image(new_media)
        raise

    if new_media:
        remove_image(old_media)

    return jsonify({"data": post_out_schema.dump(post)})


@bp.delete("/posts/<post_id>")
@jwt_required()
def delete_post(post_id: str):
    """
    Delete a post together with its comments, likes and media
    ---
    tags:
      - Posts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200:
        description: The deleted post
      403:
        description: Not the author
      404:
        description: Not found
    """
    session = storage.get_session()
    post = get_post_or_404(post_id)
    ensure_owner(post)
    body = post_out_schema.dump(post)

    session.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
    session.query(Like).filter(Like.post_id == post.id).delete(synchronize_session=False)
    storage.delete(post)
    storage.save()
    remove_image(post.media)

    return jsonify({"data": body})

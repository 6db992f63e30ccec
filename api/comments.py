from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.comment import Comment
from models.post import Post
from models.schemas.common import load_payload
from models.schemas.comment import CommentCreateSchema, CommentUpdateSchema, CommentOutSchema
from utils.decorators import jwt_required

bp = Blueprint("comments", __name__)

create_schema = CommentCreateSchema()
update_schema = CommentUpdateSchema()
out_schema = CommentOutSchema()
out_list_schema = CommentOutSchema(many=True)


def filtered_query():
    """Comments narrowed by the optional user_id / post_id query args."""
    session = storage.get_session()
    query = session.query(Comment)
    user_id = request.args.get("user_id")
    post_id = request.args.get("post_id")
    if user_id:
        query = query.filter(Comment.user_id == user_id)
    if post_id:
        query = query.filter(Comment.post_id == post_id)
    return query


def get_owned_comment(comment_id: str) -> Comment:
    comment = storage.get(Comment, comment_id)
    if comment is None:
        abort(404, description="Comment not found")
    if comment.user_id != g.current_user_id:
        abort(403, description="Only the author can change this comment")
    return comment


@bp.get("/comments")
@jwt_required()
def list_comments():
    """
    List comments, optionally by post and/or user
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: query
        name: post_id
        type: string
      - in: query
        name: user_id
        type: string
    responses:
      200: { description: OK }
      401: { description: Not authenticated }
    """
    rows = filtered_query().order_by(Comment.created_at.asc(), Comment.id.asc()).all()
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"total": len(rows)}})


@bp.get("/comments/count")
@jwt_required()
def count_comments():
    """
    Count comments, optionally by post and/or user
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: query
        name: post_id
        type: string
      - in: query
        name: user_id
        type: string
    responses:
      200: { description: OK }
      401: { description: Not authenticated }
    """
    return jsonify({"data": {"count": filtered_query().count()}})


@bp.get("/comments/<comment_id>")
@jwt_required()
def get_comment(comment_id: str):
    """
    Get a comment by id
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    comment = storage.get(Comment, comment_id)
    if comment is None:
        abort(404, description="Comment not found")
    return jsonify({"data": out_schema.dump(comment)})


@bp.post("/comments")
@jwt_required()
def create_comment():
    """
    Comment on a post
    ---
    tags: [Comments]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [content, post_id]
          properties:
            content: { type: string }
            post_id: { type: string }
    responses:
      201: { description: Created }
      400: { description: Missing arguments }
      404: { description: Post not found }
    """
    data = load_payload(create_schema, request.get_json(silent=True))
    if storage.get(Post, data["post_id"]) is None:
        abort(404, description="Post not found")

    comment = Comment(content=data["content"], post_id=data["post_id"], user_id=g.current_user_id)
    storage.new(comment)
    storage.save()
    return jsonify({"data": out_schema.dump(comment)}), 201


@bp.put("/comments/<comment_id>")
@jwt_required()
def update_comment(comment_id: str):
    """
    Update a comment's content
    ---
    tags: [Comments]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            content: { type: string }
    responses:
      200: { description: Updated }
      403: { description: Not the author }
      404: { description: Not found }
    """
    comment = get_owned_comment(comment_id)
    data = load_payload(update_schema, request.get_json(silent=True))
    comment.content = data["content"]
    comment.save()
    return jsonify({"data": out_schema.dump(comment)})


@bp.delete("/comments/<comment_id>")
@jwt_required()
def delete_comment(comment_id: str):
    """
    Delete a comment
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: The deleted comment }
      403: { description: Not the author }
      404: { description: Not found }
    """
    comment = get_owned_comment(comment_id)
    body = out_schema.dump(comment)
    storage.delete(comment)
    storage.save()
    return jsonify({"data": body})

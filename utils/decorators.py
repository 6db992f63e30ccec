from __future__ import annotations
from functools import wraps
from flask import request, g
from utils import sessions

# "Bearer <token>" and "JWT <token>" are both accepted
AUTH_SCHEMES = ("bearer", "jwt")


def get_bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "").strip()
    if not auth:
        return None
    parts = auth.split(None, 1)
    if len(parts) != 2 or parts[0].lower() not in AUTH_SCHEMES:
        return None
    return parts[1].strip() or None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            # Unauthorized (401) without a token, Forbidden (403) for a bad one
            g.current_user_id = sessions.authenticate(get_bearer_token())
            return fn(*args, **kwargs)

        return wrapper

    return decorator

"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- per-call nonce so tokens minted in the same second differ
"""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from flask import current_app

ACCESS = "access"
REFRESH = "refresh"
TOKEN_TYPES = (ACCESS, REFRESH)

ph = PasswordHasher()
_nonce_source = random.SystemRandom()


class TokenError(Exception):
    """Token could not be decoded: bad signature, expired, malformed or wrong type."""


class TokenExpired(TokenError):
    pass


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_nonce() -> float:
    return _nonce_source.random()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _expires_for(token_type: str) -> timedelta:
    key = "ACCESS_TOKEN_EXPIRES" if token_type == ACCESS else "REFRESH_TOKEN_EXPIRES"
    return current_app.config[key]


def create_token(user_id: str, token_type: str, nonce: float | None = None,
                 expires_in: timedelta | None = None) -> str:
    """
    Sign a token carrying {_id, random, type, iat, exp}.
    expires_in defaults to the configured window for token_type.
    """
    if token_type not in TOKEN_TYPES:
        raise ValueError(f"Unknown token type: {token_type}")
    now = _now()
    exp = now + (expires_in if expires_in is not None else _expires_for(token_type))
    payload = {
        "_id": str(user_id),
        "random": generate_nonce() if nonce is None else nonce,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, current_app.config["TOKEN_SECRET"], algorithm=current_app.config["JWT_ALGORITHM"])


def decode_token(token: str, expected_type: str = ACCESS) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenError on invalid signature, expiry,
    missing claims or a type other than expected_type.
    """
    try:
        decoded = jwt.decode(
            token,
            current_app.config["TOKEN_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError(f"Invalid token: {exc}") from exc

    if decoded.get("type") != expected_type:
        raise TokenError("Wrong token type")
    if not decoded.get("_id"):
        raise TokenError("Token has no subject")
    return decoded

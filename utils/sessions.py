"""
Session manager: access/refresh token pairs bound to a user.

Lifecycle of one refresh-token value:
    ISSUED --(one successful rotation or logout)--> CONSUMED
Presenting a CONSUMED (or never issued) token to rotation revokes every live
token of that user. New logins afterwards start a fresh set.

The live set is only read and mutated through DBStorage; nothing is cached
in process.
"""
from __future__ import annotations

import logging
from typing import NamedTuple

from models import storage
from models.user import User
from utils.exceptions import Forbidden, InvalidToken, Unauthorized
from utils.security import ACCESS, REFRESH, TokenError, create_token, decode_token, generate_nonce

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


def issue_tokens(user_id: str) -> TokenPair:
    """
    Mint an access/refresh pair sharing one fresh nonce.
    Pure: the caller persists the refresh token (see start_session).
    """
    nonce = generate_nonce()
    return TokenPair(
        access_token=create_token(user_id, ACCESS, nonce=nonce),
        refresh_token=create_token(user_id, REFRESH, nonce=nonce),
    )


def start_session(user_id: str) -> TokenPair:
    """Issue a pair and add its refresh token to the user's live set."""
    pair = issue_tokens(user_id)
    storage.add_refresh_token(user_id, pair.refresh_token)
    return pair


def authenticate(access_token: str | None) -> str:
    """
    Return the user id of a valid access token.
    Stateless: signature, expiry and type only.
    """
    if not access_token:
        raise Unauthorized("Missing Token")
    try:
        decoded = decode_token(access_token, expected_type=ACCESS)
    except TokenError as exc:
        raise Forbidden(str(exc)) from exc
    return decoded["_id"]


def _load_token_owner(refresh_token: str, error_cls) -> User:
    try:
        decoded = decode_token(refresh_token, expected_type=REFRESH)
    except TokenError as exc:
        raise error_cls(str(exc)) from exc

    user = storage.get(User, decoded["_id"])
    if user is None:
        raise error_cls("Unknown user")
    return user


def rotate_refresh_token(old_refresh_token: str) -> User:
    """
    Consume old_refresh_token and return its owner.

    Removal is a single conditional delete, so of two concurrent rotations of
    the same token exactly one succeeds. A token that is no longer live
    revokes all of the owner's sessions.
    """
    user = _load_token_owner(old_refresh_token, InvalidToken)

    if not storage.remove_refresh_token(user.id, old_refresh_token):
        revoked = storage.clear_refresh_tokens(user.id)
        logger.warning(
            "Refresh token reuse detected for user %s; revoked %d live token(s)",
            user.id,
            revoked,
        )
        raise InvalidToken("Refresh token reuse detected")

    return user


def refresh_session(old_refresh_token: str) -> tuple[User, TokenPair]:
    """Rotate old_refresh_token and start its replacement session."""
    user = rotate_refresh_token(old_refresh_token)
    pair = start_session(user.id)
    return user, pair


def logout(refresh_token: str) -> bool:
    """
    End the session of refresh_token. Returns whether it was still live.
    Never revokes other sessions.
    """
    user = _load_token_owner(refresh_token, Forbidden)
    removed = storage.remove_refresh_token(user.id, refresh_token)
    logger.info("User %s logged out (token live: %s)", user.id, removed)
    return removed

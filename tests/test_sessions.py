"""Session manager: issue, authenticate, rotate with reuse detection, logout."""

import logging
import threading
import time
from datetime import timedelta

import jwt
import pytest

from models import storage
from utils import sessions
from utils.exceptions import Forbidden, InvalidToken, Unauthorized
from utils.security import ACCESS, REFRESH, create_token, decode_token


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


def test_issue_tokens_is_pure_and_shares_one_nonce(ctx, make_user):
    user_id = make_user()
    pair = sessions.issue_tokens(user_id)

    access = decode_token(pair.access_token, expected_type=ACCESS)
    refresh = decode_token(pair.refresh_token, expected_type=REFRESH)
    assert access["_id"] == refresh["_id"] == user_id
    assert access["random"] == refresh["random"]
    assert storage.count_refresh_tokens(user_id) == 0


def test_started_session_refresh_token_is_live(ctx, make_user):
    user_id = make_user()
    pair = sessions.start_session(user_id)
    assert storage.has_refresh_token(user_id, pair.refresh_token)


def test_authenticate_returns_user_id(ctx, make_user):
    user_id = make_user()
    pair = sessions.issue_tokens(user_id)
    assert sessions.authenticate(pair.access_token) == user_id


def test_authenticate_without_token(ctx):
    with pytest.raises(Unauthorized):
        sessions.authenticate(None)
    with pytest.raises(Unauthorized):
        sessions.authenticate("")


def test_authenticate_rejects_other_secret(ctx, make_user):
    forged = jwt.encode(
        {"_id": make_user(), "random": 0.5, "type": ACCESS, "iat": 0, "exp": 4102444800},
        "not-the-configured-secret",
        algorithm="HS256",
    )
    with pytest.raises(Forbidden):
        sessions.authenticate(forged)


def test_authenticate_rejects_expired_token(ctx, make_user):
    expired = create_token(make_user(), ACCESS, expires_in=timedelta(seconds=-1))
    with pytest.raises(Forbidden):
        sessions.authenticate(expired)


def test_authenticate_rejects_refresh_token(ctx, make_user):
    pair = sessions.issue_tokens(make_user())
    with pytest.raises(Forbidden):
        sessions.authenticate(pair.refresh_token)


def test_rotation_swaps_one_live_token_for_another(ctx, make_user):
    user_id = make_user()
    first = sessions.start_session(user_id)

    user, second = sessions.refresh_session(first.refresh_token)

    assert user.id == user_id
    assert second.refresh_token != first.refresh_token
    assert not storage.has_refresh_token(user_id, first.refresh_token)
    assert storage.has_refresh_token(user_id, second.refresh_token)
    assert storage.count_refresh_tokens(user_id) == 1


def test_reuse_revokes_every_session(ctx, make_user, caplog):
    user_id = make_user()
    first = sessions.start_session(user_id)
    sessions.start_session(user_id)  # a second device
    sessions.refresh_session(first.refresh_token)
    assert storage.count_refresh_tokens(user_id) == 2

    with caplog.at_level(logging.WARNING, logger="utils.sessions"):
        with pytest.raises(InvalidToken):
            sessions.rotate_refresh_token(first.refresh_token)

    assert storage.count_refresh_tokens(user_id) == 0
    assert any("reuse" in r.getMessage() and user_id in r.getMessage() for r in caplog.records)

    # a third presentation still fails and the set stays empty
    with pytest.raises(InvalidToken):
        sessions.rotate_refresh_token(first.refresh_token)
    assert storage.count_refresh_tokens(user_id) == 0


def test_rotation_rejects_access_token(ctx, make_user):
    user_id = make_user()
    pair = sessions.start_session(user_id)
    with pytest.raises(InvalidToken):
        sessions.rotate_refresh_token(pair.access_token)
    # a wrong-type token never reaches the live set
    assert storage.count_refresh_tokens(user_id) == 1


def test_rotation_rejects_unknown_user(ctx):
    orphan = create_token("no-such-user", REFRESH)
    with pytest.raises(InvalidToken):
        sessions.rotate_refresh_token(orphan)


def test_rotation_rejects_expired_refresh_token(ctx, make_user):
    user_id = make_user()
    expired = create_token(user_id, REFRESH, expires_in=timedelta(seconds=-1))
    storage.add_refresh_token(user_id, expired)
    with pytest.raises(InvalidToken):
        sessions.rotate_refresh_token(expired)


def test_logout_removes_only_the_presented_token(ctx, make_user):
    user_id = make_user()
    phone = sessions.start_session(user_id)
    laptop = sessions.start_session(user_id)

    assert sessions.logout(phone.refresh_token) is True

    assert not storage.has_refresh_token(user_id, phone.refresh_token)
    assert storage.has_refresh_token(user_id, laptop.refresh_token)


def test_logout_twice_does_not_mass_revoke(ctx, make_user):
    user_id = make_user()
    phone = sessions.start_session(user_id)
    sessions.start_session(user_id)

    sessions.logout(phone.refresh_token)
    assert sessions.logout(phone.refresh_token) is False
    assert storage.count_refresh_tokens(user_id) == 1


def test_logout_with_bad_token(ctx):
    with pytest.raises(Forbidden):
        sessions.logout("not-a-jwt")


def test_concurrent_rotations_of_one_token_have_one_winner(app, make_user):
    user_id = make_user()
    with app.app_context():
        pair = sessions.start_session(user_id)

    workers = 8
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def rotate():
        with app.app_context():
            barrier.wait()
            try:
                sessions.rotate_refresh_token(pair.refresh_token)
                outcome = "ok"
            except InvalidToken:
                outcome = "invalid"
            except Exception as exc:  # surfaced through the assertion below
                outcome = repr(exc)
            finally:
                storage.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=rotate) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["invalid"] * (workers - 1) + ["ok"]
    assert storage.count_refresh_tokens(user_id) == 0


def test_access_token_valid_until_exp_then_rejected(ctx, make_user):
    user_id = make_user()
    token = create_token(user_id, ACCESS, expires_in=timedelta(seconds=2))
    expires_at = jwt.decode(token, options={"verify_signature": False})["exp"]

    time.sleep(max(0.0, expires_at - time.time() - 0.5))
    assert time.time() < expires_at
    assert sessions.authenticate(token) == user_id

    time.sleep(max(0.0, expires_at - time.time()) + 0.05)
    assert time.time() >= expires_at
    with pytest.raises(Forbidden):
        sessions.authenticate(token)

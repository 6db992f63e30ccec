"""DBStorage live refresh-token set."""

from models import storage
from models.user import User


def test_add_and_remove_refresh_token(make_user):
    user_id = make_user()
    storage.add_refresh_token(user_id, "token-a")

    assert storage.has_refresh_token(user_id, "token-a")
    assert storage.count_refresh_tokens(user_id) == 1

    assert storage.remove_refresh_token(user_id, "token-a") is True
    # second removal of the same value reports that nothing was removed
    assert storage.remove_refresh_token(user_id, "token-a") is False
    assert storage.count_refresh_tokens(user_id) == 0


def test_remove_is_scoped_to_the_owner(make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    storage.add_refresh_token(alice, "shared-value")

    assert storage.remove_refresh_token(bob, "shared-value") is False
    assert storage.has_refresh_token(alice, "shared-value")


def test_clear_refresh_tokens_only_touches_one_user(make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    for value in ("a1", "a2", "a3"):
        storage.add_refresh_token(alice, value)
    storage.add_refresh_token(bob, "b1")

    assert storage.clear_refresh_tokens(alice) == 3
    assert storage.count_refresh_tokens(alice) == 0
    assert storage.count_refresh_tokens(bob) == 1


def test_user_relationship_reflects_live_set(make_user):
    user_id = make_user()
    storage.add_refresh_token(user_id, "t1")
    storage.add_refresh_token(user_id, "t2")

    user = storage.get(User, user_id)
    assert sorted(user.token_values) == ["t1", "t2"]


def test_get_user_by_username(make_user):
    user_id = make_user("carol")
    assert storage.get_user_by_username("carol").id == user_id
    assert storage.get_user_by_username("nobody") is None


def test_deleting_a_user_cascades_to_tokens(make_user):
    user_id = make_user()
    storage.add_refresh_token(user_id, "t1")

    storage.delete(storage.get(User, user_id))
    storage.save()

    assert storage.count_refresh_tokens(user_id) == 0

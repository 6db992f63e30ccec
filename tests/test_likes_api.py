import pytest

from tests.helpers import bearer


@pytest.fixture()
def post_id(client, auth):
    _, headers = auth
    resp = client.post("/api/v1/posts", json={"title": "Likeable"}, headers=headers)
    return resp.get_json()["data"]["id"]


def _url(post_id):
    return f"/api/v1/likes/{post_id}"


def test_like_lifecycle(client, auth, post_id):
    _, headers = auth

    assert client.get(_url(post_id), headers=headers).get_json()["data"] == {"liked": False, "count": 0}

    liked = client.post(_url(post_id), headers=headers)
    assert liked.status_code == 201
    assert liked.get_json()["data"] == {"liked": True, "count": 1}

    again = client.post(_url(post_id), headers=headers)
    assert again.status_code == 409
    assert again.get_json()["message"] == "Post Already Liked"

    unliked = client.delete(_url(post_id), headers=headers)
    assert unliked.status_code == 200
    assert unliked.get_json()["data"] == {"liked": False, "count": 0}

    assert client.delete(_url(post_id), headers=headers).status_code == 404


def test_count_spans_users(client, auth, post_id, register, login):
    _, headers = auth
    register("bob")
    bob = bearer(login("bob")["access_token"])

    client.post(_url(post_id), headers=headers)
    client.post(_url(post_id), headers=bob)

    body = client.get(_url(post_id), headers=bob).get_json()["data"]
    assert body == {"liked": True, "count": 2}


def test_like_unknown_post(client, auth):
    _, headers = auth
    assert client.post(_url("missing"), headers=headers).status_code == 404


def test_likes_require_authentication(client, post_id):
    assert client.post(_url(post_id)).status_code == 401

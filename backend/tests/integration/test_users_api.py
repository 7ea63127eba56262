"""Integration tests for profile and follow endpoints."""

from __future__ import annotations

from tests.factories.post import FollowFactory
from tests.factories.user import UserFactory
from tests.helpers.assertions import assert_pagination, assert_problem

BASE = "/api/v1/users"


def test_directory_search_is_public_and_hides_emails(client):
    UserFactory(first_name="Margaret", username="mhamilton")
    UserFactory(first_name="Margaret", is_active=False)

    resp = client.get(f"{BASE}?search=margaret")

    assert resp.status_code == 200
    body = resp.get_json()
    assert_pagination(body, total=1)
    assert body["users"][0]["username"] == "mhamilton"
    assert "email" not in body["users"][0]


def test_public_profile_excludes_private_fields(client):
    user = UserFactory()
    body = client.get(f"{BASE}/{user.id}").get_json()

    assert body["id"] == user.id
    assert body["is_following"] is False
    assert "email" not in body
    assert "is_admin" not in body


def test_profile_visibility_gate(client, auth_headers):
    owner = UserFactory(profile_visibility="followers_only")
    fan, stranger = UserFactory(), UserFactory()
    FollowFactory(follower=fan, following=owner)

    assert_problem(client.get(f"{BASE}/{owner.id}"), 403)
    assert_problem(client.get(f"{BASE}/{owner.id}", headers=auth_headers(stranger)), 403)
    seen = client.get(f"{BASE}/{owner.id}", headers=auth_headers(fan))
    assert seen.status_code == 200
    assert seen.get_json()["is_following"] is True


def test_missing_profile_is_404(client):
    assert_problem(client.get(f"{BASE}/424242"), 404, "User not found")


def test_me_and_update_me(client, auth_headers):
    user = UserFactory()
    headers = auth_headers(user)

    me = client.get(f"{BASE}/me", headers=headers).get_json()
    assert me["email"] == user.email

    patched = client.patch(
        f"{BASE}/me", json={"bio": "Astronomer", "profile_visibility": "private"}, headers=headers
    )
    assert patched.status_code == 200
    assert patched.get_json()["bio"] == "Astronomer"
    assert patched.get_json()["profile_visibility"] == "private"

    put = client.put(f"{BASE}/me", json={"location": "Paris"}, headers=headers)
    assert put.get_json()["location"] == "Paris"
    assert put.get_json()["bio"] == "Astronomer"


def test_update_me_rejects_bad_values(client, auth_headers):
    UserFactory(username="someone")
    user = UserFactory()
    headers = auth_headers(user)

    assert_problem(client.patch(f"{BASE}/me", json={}, headers=headers), 400)
    assert_problem(
        client.patch(f"{BASE}/me", json={"profile_visibility": "friends"}, headers=headers), 400
    )
    assert_problem(
        client.patch(f"{BASE}/me", json={"username": "someone"}, headers=headers),
        409,
        "Username already taken",
    )


def test_follow_lifecycle(client, auth_headers):
    fan, idol = UserFactory(), UserFactory()
    headers = auth_headers(fan)

    first = client.post(f"{BASE}/{idol.id}/follow", headers=headers)
    assert first.get_json() == {"message": "Successfully followed user"}

    assert_problem(
        client.post(f"{BASE}/{idol.id}/follow", headers=headers), 409, "Already following this user"
    )

    followers = client.get(f"{BASE}/{idol.id}/followers").get_json()
    assert [u["id"] for u in followers["users"]] == [fan.id]
    following = client.get(f"{BASE}/{fan.id}/following").get_json()
    assert [u["id"] for u in following["users"]] == [idol.id]

    for _ in range(2):
        resp = client.delete(f"{BASE}/{idol.id}/follow", headers=headers)
        assert resp.get_json() == {"message": "Successfully unfollowed user"}
    assert_pagination(client.get(f"{BASE}/{idol.id}/followers").get_json(), total=0)


def test_follow_errors(client, auth_headers):
    user = UserFactory()
    headers = auth_headers(user)

    assert_problem(
        client.post(f"{BASE}/{user.id}/follow", headers=headers), 400, "You cannot follow yourself"
    )
    assert_problem(client.post(f"{BASE}/999999/follow", headers=headers), 404)
    assert_problem(client.post(f"{BASE}/{user.id}/follow"), 401)

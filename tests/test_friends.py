import pytest


@pytest.fixture
def alice(make_user):
    return make_user("Alice")


@pytest.fixture
def bob(make_user):
    return make_user("Bob")


def _send(client, headers, addressee_id):
    return client.post("/api/friends/requests", json={"addressee_id": addressee_id}, headers=headers)


def test_friend_request_lifecycle(client, auth_headers, alice, bob):
    response = _send(client, auth_headers(alice), bob["user_id"])
    assert response.status_code == 201, response.text
    assert response.json()["message"] == "Friend request sent successfully."
    request_id = response.json()["friendship"]["id"]

    pending = client.get("/api/friends/requests/pending", headers=auth_headers(bob)).json()
    assert [(p["id"], p["requester"]["name"]) for p in pending] == [(request_id, "Alice")]
    assert client.get("/api/friends/requests/pending", headers=auth_headers(alice)).json() == []

    response = client.patch(f"/api/friends/requests/{request_id}/accept", headers=auth_headers(bob))
    assert response.status_code == 200
    assert response.json()["friendship"]["status"] == "ACCEPTED"

    assert [f["name"] for f in client.get("/api/friends", headers=auth_headers(alice)).json()] == ["Bob"]
    assert [f["name"] for f in client.get("/api/friends", headers=auth_headers(bob)).json()] == ["Alice"]


@pytest.mark.parametrize("existing_requester, status, message", [
    ("alice", "PENDING", "Friend request already sent and is pending."),
    ("bob", "PENDING", "This user has already sent you a friend request. Please accept or reject it."),
    ("bob", "ACCEPTED", "You are already friends with this user."),
])
def test_duplicate_requests(client, fake_db, auth_headers, alice, bob, existing_requester, status, message):
    requester, addressee = (alice, bob) if existing_requester == "alice" else (bob, alice)
    fake_db.seed("friendships", requester_id=requester["user_id"], addressee_id=addressee["user_id"], status=status)

    response = _send(client, auth_headers(alice), bob["user_id"])
    assert response.status_code == 400
    assert response.json()["message"] == message


def test_invalid_requests(client, auth_headers, alice):
    response = _send(client, auth_headers(alice), alice["user_id"])
    assert response.status_code == 400
    assert response.json()["message"] == "You cannot send a friend request to yourself."

    response = _send(client, auth_headers(alice), 999)
    assert response.status_code == 404
    assert response.json()["message"] == "Recipient user not found."


def test_only_addressee_can_answer(client, fake_db, auth_headers, alice, bob):
    friendship = fake_db.seed("friendships", requester_id=alice["user_id"], addressee_id=bob["user_id"])

    response = client.patch(f"/api/friends/requests/{friendship['id']}/accept", headers=auth_headers(alice))
    assert response.status_code == 404
    assert response.json()["message"] == "Pending friend request not found or already actioned."

    response = client.patch(f"/api/friends/requests/{friendship['id']}/reject", headers=auth_headers(bob))
    assert response.status_code == 200
    assert fake_db.rows("friendships") == []


def test_remove_friend(client, fake_db, auth_headers, alice, bob):
    fake_db.seed("friendships", requester_id=bob["user_id"], addressee_id=alice["user_id"], status="ACCEPTED")

    response = client.delete(f"/api/friends/{bob['user_id']}", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["message"] == "Friend removed successfully."
    assert fake_db.rows("friendships") == []

    response = client.delete(f"/api/friends/{bob['user_id']}", headers=auth_headers(alice))
    assert response.status_code == 404

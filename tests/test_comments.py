# tests/test_comments.py

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from songpig.models.song import Comment


def _signup(client: TestClient, username: str, role: str = "artist") -> tuple[dict, dict]:
    client.post(
        "/api/auth/register",
        json={"username": username, "password": "secret123", "role": role},
    )
    res = client.post("/api/auth/login", json={"identifier": username, "password": "secret123"})
    assert res.status_code == 200, res.text
    return res.json()["user"], {"Authorization": f"Bearer {res.json()['access_token']}"}


def _setup_room(client: TestClient, owner: dict, activate: bool = True) -> tuple[str, list[dict]]:
    room_id = client.post("/api/rooms", json={"name": "comments"}, headers=owner).json()["id"]
    songs = []
    for title in ("a", "b"):
        res = client.post(
            f"/api/rooms/{room_id}/songs",
            json={"title": title, "url": f"https://example.com/{title}.mp3"},
            headers=owner,
        )
        songs.append(res.json())
    if activate:
        res = client.patch(f"/api/rooms/{room_id}/status", json={"status": "active"}, headers=owner)
        assert res.status_code == 200
    return room_id, songs


def _comment(client: TestClient, room_id: str, song_id: str, headers: dict, **payload):
    payload.setdefault("text", "nice mix")
    return client.post(
        f"/api/rooms/{room_id}/songs/{song_id}/comments", json=payload, headers=headers
    )


def test_comment_on_active_room(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    listener, headers = _signup(client, "listener1", role="listener")
    room_id, songs = _setup_room(client, owner)

    res = _comment(client, room_id, songs[0]["id"], headers)
    assert res.status_code == 201
    body = res.json()
    assert body["author_id"] == listener["id"]
    assert body["author_username"] == "listener1"
    assert body["is_hidden"] is False

    room = client.get(f"/api/rooms/{room_id}").json()
    assert [c["text"] for c in room["songs"][0]["comments"]] == ["nice mix"]


def test_comment_requires_active_room(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id, songs = _setup_room(client, owner, activate=False)

    res = _comment(client, room_id, songs[0]["id"], owner)
    assert res.status_code == 403

    client.patch(f"/api/rooms/{room_id}/status", json={"status": "active"}, headers=owner)
    client.patch(f"/api/rooms/{room_id}/status", json={"status": "archived"}, headers=owner)
    res = _comment(client, room_id, songs[0]["id"], owner)
    assert res.status_code == 403


def test_guest_cannot_comment(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id, songs = _setup_room(client, owner)
    res = client.post(
        f"/api/rooms/{room_id}/songs/{songs[0]['id']}/comments", json={"text": "hi"}
    )
    assert res.status_code == 401


def test_empty_comment_is_400(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id, songs = _setup_room(client, owner)
    assert _comment(client, room_id, songs[0]["id"], owner, text="   ").status_code == 400


def test_anonymous_comment_hides_author(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    listener, headers = _signup(client, "listener1", role="listener")
    room_id, songs = _setup_room(client, owner)

    res = _comment(client, room_id, songs[0]["id"], headers, is_anonymous=True)
    assert res.status_code == 201
    body = res.json()
    assert body["author_username"] == "Anonymous"
    assert body["author_id"] is None

    # 本当の投稿者は DB には残っている
    row = db.get(Comment, body["id"])
    assert row.author_id == listener["id"]


def test_reply_must_target_same_song(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id, songs = _setup_room(client, owner)
    parent = _comment(client, room_id, songs[0]["id"], owner).json()

    res = _comment(client, room_id, songs[0]["id"], owner, parent_comment_id=parent["id"])
    assert res.status_code == 201
    assert res.json()["parent_comment_id"] == parent["id"]

    res = _comment(client, room_id, songs[1]["id"], owner, parent_comment_id=parent["id"])
    assert res.status_code == 404


def test_hidden_comments_only_visible_to_manager(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    _, listener = _signup(client, "listener1", role="listener")
    room_id, songs = _setup_room(client, owner)
    song_id = songs[0]["id"]
    comment = _comment(client, room_id, song_id, listener).json()

    url = f"/api/rooms/{room_id}/songs/{song_id}/comments/{comment['id']}/visibility"
    assert client.patch(url, json={"hidden": True}, headers=listener).status_code == 403

    res = client.patch(url, json={"hidden": True}, headers=owner)
    assert res.status_code == 200
    assert res.json()["is_hidden"] is True

    public = client.get(f"/api/rooms/{room_id}", headers=listener).json()
    assert public["songs"][0]["comments"] == []

    managed = client.get(f"/api/rooms/{room_id}", headers=owner).json()
    assert len(managed["songs"][0]["comments"]) == 1

    res = client.patch(url, json={"hidden": False}, headers=owner)
    assert res.json()["is_hidden"] is False


def test_reaction_toggle(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    listener, headers = _signup(client, "listener1", role="listener")
    room_id, songs = _setup_room(client, owner)
    comment = _comment(client, room_id, songs[0]["id"], owner).json()
    url = f"/api/comments/{comment['id']}/reactions"

    res = client.post(url, json={"reaction_type": "fire"}, headers=headers)
    assert res.status_code == 201
    assert res.json()["action"] == "added"

    res = client.post(url, json={"reaction_type": "love"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["action"] == "changed"

    client.post(url, json={"reaction_type": "love"}, headers=owner)

    summary = client.get(url).json()
    assert summary["total"] == 2
    assert summary["counts"] == {"love": 2}
    assert summary["user_reactions"][listener["id"]] == ["love"]

    res = client.post(url, json={"reaction_type": "love"}, headers=headers)
    assert res.json()["action"] == "removed"
    assert client.get(url).json()["total"] == 1


def test_reaction_validation(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id, songs = _setup_room(client, owner)
    comment = _comment(client, room_id, songs[0]["id"], owner).json()

    res = client.post(
        f"/api/comments/{comment['id']}/reactions", json={"reaction_type": "meh"}, headers=owner
    )
    assert res.status_code == 422

    res = client.post("/api/comments/missing/reactions", json={"reaction_type": "like"}, headers=owner)
    assert res.status_code == 404

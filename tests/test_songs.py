# tests/test_songs.py

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from songpig.models.comparison import Comparison


def _signup(client: TestClient, username: str, role: str = "artist") -> tuple[dict, dict]:
    client.post(
        "/api/auth/register",
        json={"username": username, "password": "secret123", "role": role},
    )
    res = client.post("/api/auth/login", json={"identifier": username, "password": "secret123"})
    assert res.status_code == 200, res.text
    return res.json()["user"], {"Authorization": f"Bearer {res.json()['access_token']}"}


def _admin(client: TestClient) -> dict:
    res = client.post("/api/auth/login", json={"identifier": "admin", "password": "admin123"})
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


def _create_room(client: TestClient, headers: dict) -> str:
    res = client.post("/api/rooms", json={"name": "song test"}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["id"]


def _post_song(client: TestClient, room_id: str, headers: dict, title: str = "mix", **extra):
    payload = {"title": title, "url": f"https://example.com/{title}.mp3"}
    payload.update(extra)
    return client.post(f"/api/rooms/{room_id}/songs", json=payload, headers=headers)


def test_add_song_keeps_creation_order(client: TestClient, db: Session):
    user, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)

    first = _post_song(client, room_id, owner, "first")
    second = _post_song(client, room_id, owner, "second")
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["uploader_id"] == user["id"]
    assert first.json()["storage_type"] == "external"

    room = client.get(f"/api/rooms/{room_id}", headers=owner).json()
    assert [s["title"] for s in room["songs"]] == ["first", "second"]
    assert room["song_count"] == 2


def test_third_song_is_rejected(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)
    _post_song(client, room_id, owner, "a")
    _post_song(client, room_id, owner, "b")

    res = _post_song(client, room_id, owner, "c")
    assert res.status_code == 400
    assert res.json()["detail"] == "Room already has 2 songs"

    # 管理者でも上限は超えられない
    res = _post_song(client, room_id, _admin(client), "d")
    assert res.status_code == 400


def test_only_manager_can_add_song(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    _, other = _signup(client, "artist2")
    room_id = _create_room(client, owner)

    # draft は他人には見えない
    assert _post_song(client, room_id, other).status_code == 404
    assert _post_song(client, room_id, _admin(client)).status_code == 201


def test_empty_title_or_url_is_400(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)
    res = client.post(
        f"/api/rooms/{room_id}/songs", json={"title": "  ", "url": "x"}, headers=owner
    )
    assert res.status_code == 400


def test_cloudflare_song_needs_storage_key(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)

    res = _post_song(client, room_id, owner, "cf", storage_type="cloudflare")
    assert res.status_code == 400

    res = _post_song(
        client, room_id, owner, "cf", storage_type="cloudflare",
        storage_key=f"rooms/{room_id}/1_cf.mp3",
    )
    assert res.status_code == 201
    assert res.json()["storage_key"] == f"rooms/{room_id}/1_cf.mp3"


def test_remove_song_only_in_draft(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)
    a = _post_song(client, room_id, owner, "a").json()
    b = _post_song(client, room_id, owner, "b").json()

    client.patch(f"/api/rooms/{room_id}/status", json={"status": "active"}, headers=owner)
    res = client.delete(f"/api/rooms/{room_id}/songs/{a['id']}", headers=owner)
    assert res.status_code == 400

    client.patch(f"/api/rooms/{room_id}/status", json={"status": "draft"}, headers=owner)
    res = client.delete(f"/api/rooms/{room_id}/songs/{a['id']}", headers=owner)
    assert res.status_code == 204

    room = client.get(f"/api/rooms/{room_id}", headers=owner).json()
    assert [s["id"] for s in room["songs"]] == [b["id"]]

    res = client.delete(f"/api/rooms/{room_id}/songs/{a['id']}", headers=owner)
    assert res.status_code == 404


def test_remove_song_drops_its_comparisons(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    _, voter = _signup(client, "listener1", role="listener")
    room_id = _create_room(client, owner)
    a = _post_song(client, room_id, owner, "a").json()
    b = _post_song(client, room_id, owner, "b").json()
    client.patch(f"/api/rooms/{room_id}/status", json={"status": "active"}, headers=owner)

    res = client.post(
        f"/api/rooms/{room_id}/compare",
        json={"song_a_id": a["id"], "song_b_id": b["id"], "winner_id": a["id"]},
        headers=voter,
    )
    assert res.status_code == 200

    client.patch(f"/api/rooms/{room_id}/status", json={"status": "draft"}, headers=owner)
    assert client.delete(f"/api/rooms/{room_id}/songs/{a['id']}", headers=owner).status_code == 204

    assert db.query(Comparison).filter(Comparison.room_id == room_id).count() == 0


def test_get_single_song(client: TestClient, db: Session):
    _, owner = _signup(client, "artist1")
    room_id = _create_room(client, owner)
    song = _post_song(client, room_id, owner, "solo").json()

    res = client.get(f"/api/rooms/{room_id}/songs/{song['id']}", headers=owner)
    assert res.status_code == 200
    assert res.json()["title"] == "solo"

    res = client.get(f"/api/rooms/{room_id}/songs/missing", headers=owner)
    assert res.status_code == 404

# tests/test_artist_stats.py

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session


def _signup(client: TestClient, username: str, role: str = "listener") -> dict:
    client.post(
        "/api/auth/register",
        json={"username": username, "password": "secret123", "role": role},
    )
    res = client.post("/api/auth/login", json={"identifier": username, "password": "secret123"})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


def test_stats_for_artist_without_rooms(client: TestClient, db: Session):
    headers = _signup(client, "artist1", role="artist")
    res = client.get("/api/artist/stats", headers=headers)
    assert res.status_code == 200
    assert res.json() == {
        "stats": {
            "total_rooms": 0,
            "total_songs": 0,
            "total_comparisons": 0,
            "total_comments": 0,
        },
        "recent_comments": [],
        "song_stats": [],
    }


def test_stats_count_votes_and_comments(client: TestClient, db: Session):
    owner = _signup(client, "artist1", role="artist")
    room_id = client.post("/api/rooms", json={"name": "stats"}, headers=owner).json()["id"]
    song_ids = []
    for title in ("a", "b"):
        res = client.post(
            f"/api/rooms/{room_id}/songs",
            json={"title": title, "url": f"https://example.com/{title}.mp3"},
            headers=owner,
        )
        song_ids.append(res.json()["id"])
    a, b = song_ids
    client.patch(f"/api/rooms/{room_id}/status", json={"status": "active"}, headers=owner)

    for name, winner in (("voter1", a), ("voter2", a), ("voter3", b)):
        voter = _signup(client, name)
        client.post(
            f"/api/rooms/{room_id}/compare",
            json={"song_a_id": a, "song_b_id": b, "winner_id": winner},
            headers=voter,
        )

    voter = _signup(client, "commenter")
    client.post(
        f"/api/rooms/{room_id}/songs/{a}/comments",
        json={"text": "love the bass", "is_anonymous": True},
        headers=voter,
    )

    body = client.get("/api/artist/stats", headers=owner).json()
    assert body["stats"] == {
        "total_rooms": 1,
        "total_songs": 2,
        "total_comparisons": 3,
        "total_comments": 1,
    }

    by_title = {s["song_title"]: s for s in body["song_stats"]}
    assert by_title["a"]["wins"] == 2
    assert by_title["a"]["losses"] == 1
    assert by_title["a"]["win_rate"] == 67
    assert by_title["b"]["win_rate"] == 33

    [comment] = body["recent_comments"]
    assert comment["author_username"] == "Anonymous"
    assert comment["song_title"] == "a"
    assert comment["room_name"] == "Stats - Artist1"


def test_stats_ignore_other_artists_rooms(client: TestClient, db: Session):
    owner = _signup(client, "artist1", role="artist")
    other = _signup(client, "artist2", role="artist")
    client.post("/api/rooms", json={"name": "mine"}, headers=owner)

    body = client.get("/api/artist/stats", headers=other).json()
    assert body["stats"]["total_rooms"] == 0

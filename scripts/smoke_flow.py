#!/usr/bin/env python3
"""
起動中のサーバー（DEBUG_ENDPOINTS=true）に対して一連の流れを確認するスクリプト。

    uvicorn songpig.main:app
    python scripts/smoke_flow.py [BASE_URL]
"""
import json
import sys
from urllib import request, error

BASE_URL = "http://127.0.0.1:8000"


def api(method, path, body=None, token=None):
    url = BASE_URL + path
    data = None
    headers = {}
    if body is not None:
        data = json.dumps(body).encode("utf-8")
        headers["Content-Type"] = "application/json"
    if token:
        headers["Authorization"] = f"Bearer {token}"
    req = request.Request(url, data=data, headers=headers, method=method)
    try:
        with request.urlopen(req, timeout=10) as resp:
            payload = resp.read().decode("utf-8")
            return resp.status, json.loads(payload) if payload else None
    except error.HTTPError as e:
        payload = e.read().decode("utf-8")
        try:
            return e.code, json.loads(payload)
        except json.JSONDecodeError:
            return e.code, {"detail": payload}
    except error.URLError as e:
        return 0, {"detail": str(e.reason)}


def must_ok(status, data, label):
    if status < 200 or status >= 300:
        raise RuntimeError(f"{label} failed: {status} {data}")
    return data


def expect_status(status, data, expected, label):
    if status != expected:
        raise RuntimeError(f"{label}: expected {expected}, got {status} {data}")
    return data


def print_case(title):
    print(f"\n=== {title} ===")


def reset_and_seed(activate=True):
    status, data = api("POST", "/api/debug/reset_and_seed", {"activate": activate})
    return must_ok(status, data, "reset_and_seed")


def login(username, password):
    status, data = api("POST", "/api/auth/login", {"identifier": username, "password": password})
    return must_ok(status, data, f"login {username}")["access_token"]


def register(username, password, role="listener"):
    status, data = api(
        "POST",
        "/api/auth/register",
        {"username": username, "password": password, "role": role},
    )
    must_ok(status, data, f"register {username}")
    return login(username, password)


def vote(room_id, token, song_a, song_b, winner):
    return api(
        "POST",
        f"/api/rooms/{room_id}/compare",
        {"song_a_id": song_a, "song_b_id": song_b, "winner_id": winner},
        token=token,
    )


def fetch_win_rate(room_id, song_id):
    status, data = api("GET", f"/api/rooms/{room_id}/winrate/{song_id}")
    return must_ok(status, data, "winrate")


def case_vote_and_win_rate(seed):
    print_case("vote and win rate")
    room_id = seed["room_id"]
    song_a, song_b = seed["song_ids"]

    # 招待コードから部屋に入る
    listener = login("debug_listener", seed["password"])
    status, data = api("GET", f"/api/rooms/invite/{seed['invite_code']}", token=listener)
    must_ok(status, data, "invite lookup")

    status, pair = api("GET", f"/api/rooms/{room_id}/compare", token=listener)
    pair = must_ok(status, pair, "next pair")
    if {pair["song_a"]["id"], pair["song_b"]["id"]} != {song_a, song_b}:
        raise RuntimeError(f"unexpected pair {pair}")

    must_ok(*vote(room_id, listener, song_a, song_b, song_a), "vote")
    # 投票し直し（上書きされるはず）
    must_ok(*vote(room_id, listener, song_b, song_a, song_b), "revote")

    for i in range(3):
        token = register(f"smoke_voter{i}", "password123")
        must_ok(*vote(room_id, token, song_a, song_b, song_a), "extra vote")

    rate_a = fetch_win_rate(room_id, song_a)
    if rate_a["wins"] != 3 or rate_a["losses"] != 1:
        raise RuntimeError(f"unexpected win rate {rate_a}")
    print(f"song A win rate {rate_a['win_rate']:.2f}%")
    print("vote ok")


def case_comments(seed):
    print_case("comments")
    room_id = seed["room_id"]
    song_a = seed["song_ids"][0]
    listener = login("debug_listener", seed["password"])

    status, data = api(
        "POST",
        f"/api/rooms/{room_id}/songs/{song_a}/comments",
        {"text": "smoke comment", "is_anonymous": True},
        token=listener,
    )
    comment = must_ok(status, data, "comment")
    if comment["author_username"] != "Anonymous":
        raise RuntimeError(f"anonymous comment leaked author: {comment}")

    status, data = api(
        "POST",
        f"/api/comments/{comment['id']}/reactions",
        {"reaction_type": "fire"},
        token=listener,
    )
    must_ok(status, data, "reaction")
    print("comments ok")


def case_draft_rules():
    print_case("draft rules")
    seed = reset_and_seed(activate=False)
    room_id = seed["room_id"]
    artist = login("debug_artist", seed["password"])
    listener = login("debug_listener", seed["password"])

    status, data = api("GET", f"/api/rooms/{room_id}", token=listener)
    expect_status(status, data, 404, "draft hidden")

    status, data = api(
        "POST",
        f"/api/rooms/{room_id}/songs",
        {"title": "third", "url": "https://example.com/3.mp3"},
        token=artist,
    )
    expect_status(status, data, 400, "third song")

    status, data = api(
        "PATCH", f"/api/rooms/{room_id}/status", {"status": "active"}, token=artist
    )
    must_ok(status, data, "activate")
    print("draft rules ok")


def main():
    global BASE_URL
    if len(sys.argv) > 1:
        BASE_URL = sys.argv[1].rstrip("/")

    seed = reset_and_seed()
    case_vote_and_win_rate(seed)
    case_comments(seed)
    case_draft_rules()

    print("\nALL OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())

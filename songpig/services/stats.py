# songpig/services/stats.py
from sqlalchemy.orm import Session

from ..models.comparison import Comparison
from ..models.enums import RoomStatus
from ..models.room import Room
from ..models.song import Comment, Song
from .votes import tally

RECENT_COMMENTS_LIMIT = 20


def artist_stats(db: Session, artist_id: str) -> dict:
    """アーティスト本人の部屋（deleted 以外）の集計"""
    rooms = (
        db.query(Room)
        .filter(Room.artist_id == artist_id, Room.status != RoomStatus.DELETED)
        .all()
    )
    room_names = {r.id: r.name for r in rooms}
    room_ids = list(room_names)

    if not room_ids:
        return {
            "stats": {
                "total_rooms": 0,
                "total_songs": 0,
                "total_comparisons": 0,
                "total_comments": 0,
            },
            "recent_comments": [],
            "song_stats": [],
        }

    songs = db.query(Song).filter(Song.room_id.in_(room_ids)).all()
    song_titles = {s.id: s.title for s in songs}
    comparisons = db.query(Comparison).filter(Comparison.room_id.in_(room_ids)).all()

    comment_query = db.query(Comment).filter(Comment.room_id.in_(room_ids))
    total_comments = comment_query.count()
    recent = (
        comment_query.order_by(Comment.created_at.desc())
        .limit(RECENT_COMMENTS_LIMIT)
        .all()
    )

    song_stats = []
    for song in songs:
        result = tally(comparisons, song.id)
        song_stats.append(
            {
                "song_id": song.id,
                "song_title": song.title,
                "room_id": song.room_id,
                "room_name": room_names.get(song.room_id, "Unknown Room"),
                "wins": result.wins,
                "losses": result.losses,
                "total_comparisons": result.wins + result.losses,
                "win_rate": round(result.win_rate),
            }
        )
    song_stats.sort(key=lambda s: s["total_comparisons"], reverse=True)

    recent_comments = [
        {
            "id": c.id,
            "text": c.text,
            "author_username": c.display_author,
            "song_id": c.song_id,
            "song_title": song_titles.get(c.song_id, "Unknown Song"),
            "room_id": c.room_id,
            "room_name": room_names.get(c.room_id, "Unknown Room"),
            "created_at": c.created_at,
        }
        for c in recent
    ]

    return {
        "stats": {
            "total_rooms": len(rooms),
            "total_songs": len(songs),
            "total_comparisons": len(comparisons),
            "total_comments": total_comments,
        },
        "recent_comments": recent_comments,
        "song_stats": song_stats,
    }

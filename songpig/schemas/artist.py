# songpig/schemas/artist.py

from datetime import datetime

from pydantic import BaseModel


class ArtistTotals(BaseModel):
    total_rooms: int
    total_songs: int
    total_comparisons: int
    total_comments: int


class RecentCommentItem(BaseModel):
    id: str
    text: str
    author_username: str
    song_id: str
    song_title: str
    room_id: str
    room_name: str
    created_at: datetime


class SongStatItem(BaseModel):
    song_id: str
    song_title: str
    room_id: str
    room_name: str
    wins: int
    losses: int
    total_comparisons: int
    win_rate: float


class ArtistStatsOut(BaseModel):
    stats: ArtistTotals
    recent_comments: list[RecentCommentItem]
    song_stats: list[SongStatItem]

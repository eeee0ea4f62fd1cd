# songpig/schemas/comparison.py

from typing import Optional

from pydantic import BaseModel

from .song import SongOut


class VoteCreate(BaseModel):
    song_a_id: str
    song_b_id: str
    winner_id: str


class VoteOut(BaseModel):
    success: bool


class ComparePairOut(BaseModel):
    # 曲が 2 曲未満のときは両方 None
    song_a: Optional[SongOut] = None
    song_b: Optional[SongOut] = None


class WinRateOut(BaseModel):
    win_rate: float
    wins: int
    losses: int

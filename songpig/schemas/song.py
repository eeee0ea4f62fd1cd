# songpig/schemas/song.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..models.enums import ReactionType, SongSourceType, SongStorageType


class SongCreate(BaseModel):
    title: str
    url: str
    source_type: SongSourceType = SongSourceType.DIRECT
    storage_type: SongStorageType = SongStorageType.EXTERNAL
    storage_key: Optional[str] = None


class CommentOut(BaseModel):
    id: str
    song_id: str
    room_id: str
    # 匿名コメントでは None（本当の投稿者は内部にだけ保持）
    author_id: Optional[str] = None
    author_username: str
    text: str
    is_anonymous: bool
    parent_comment_id: Optional[str] = None
    is_hidden: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SongOut(BaseModel):
    id: str
    room_id: str
    title: str
    url: str
    uploader_id: str
    uploader_name: str
    source_type: SongSourceType
    storage_type: SongStorageType
    storage_key: Optional[str] = None
    position: int
    created_at: datetime
    comments: list[CommentOut] = []

    model_config = ConfigDict(from_attributes=True)


# --- コメント ---

class CommentCreate(BaseModel):
    text: str
    is_anonymous: bool = False
    parent_comment_id: Optional[str] = None


class CommentVisibilityUpdate(BaseModel):
    hidden: bool


class ReactionCreate(BaseModel):
    reaction_type: ReactionType


class ReactionToggleOut(BaseModel):
    action: str  # 'added' | 'changed' | 'removed'
    reaction_type: ReactionType


class ReactionSummaryOut(BaseModel):
    counts: dict[str, int]
    user_reactions: dict[str, list[str]]
    total: int

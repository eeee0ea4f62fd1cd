# songpig/schemas/room.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..models.enums import AccessType, RoomStatus
from .song import SongOut

StatusFilterLiteral = Literal["all", "active", "draft", "archived"]


class RoomCreate(BaseModel):
    name: str
    description: Optional[str] = ""


class RoomSummaryOut(BaseModel):
    id: str
    name: str
    description: str
    artist_id: str
    artist_name: Optional[str] = None
    invite_code: str
    access_type: AccessType
    status: RoomStatus
    is_starter_room: bool
    created_at: datetime
    updated_at: datetime
    last_accessed: Optional[datetime] = None
    song_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class RoomOut(RoomSummaryOut):
    artist_bio: Optional[str] = None
    invited_artist_ids: list[str] = []
    songs: list[SongOut] = []


# --- ステータス・メタデータ ---

class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomMetaUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_starter_room: Optional[bool] = None


class RoomInviteCreate(BaseModel):
    artist_id: str


class BulkStatusRequest(BaseModel):
    room_ids: list[str]
    status: RoomStatus


class BulkStatusOut(BaseModel):
    success: bool
    updated: int
    message: str


# --- レビュアー向け ---

class StarterRoomItem(BaseModel):
    id: str
    name: str
    artist_name: Optional[str] = None
    artist_handle: Optional[str] = None
    created_at: datetime


class ReviewedRoomItem(BaseModel):
    id: str
    name: str
    artist_name: Optional[str] = None
    artist_handle: Optional[str] = None
    last_reviewed_at: datetime
    preferred_song_title: Optional[str] = None


class ReviewerRoomsOut(BaseModel):
    role: str
    starter_rooms: list[StarterRoomItem]
    reviewed_rooms: list[ReviewedRoomItem]

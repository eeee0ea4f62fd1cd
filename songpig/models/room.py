# songpig/models/room.py
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship

from ..db import Base, utcnow
from .enums import AccessType, RoomStatus, enum_column_type


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    artist_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    # 作成時点のアーティスト表示名・紹介文のスナップショット
    artist_name = Column(String, nullable=True)
    artist_bio = Column(Text, nullable=True)

    # 6 文字の英大文字・数字。削除されていない部屋の中で一意
    invite_code = Column(String(6), nullable=False, index=True)
    access_type = Column(
        enum_column_type(AccessType), nullable=False, default=AccessType.INVITE_CODE
    )
    status = Column(enum_column_type(RoomStatus), nullable=False, default=RoomStatus.DRAFT)
    is_starter_room = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    last_accessed = Column(DateTime, nullable=True)

    songs = relationship(
        "Song",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="Song.position",
    )
    invites = relationship("RoomInvite", back_populates="room", cascade="all, delete-orphan")

    @property
    def invited_artist_ids(self) -> list[str]:
        return [inv.artist_id for inv in self.invites]

    @property
    def song_count(self) -> int:
        return len(self.songs)


class RoomInvite(Base):
    __tablename__ = "room_invited_artists"

    id = Column(String, primary_key=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False, index=True)
    artist_id = Column(String, ForeignKey("users.id"), nullable=False)
    invited_at = Column(DateTime, default=utcnow, nullable=False)

    room = relationship("Room", back_populates="invites")

    __table_args__ = (
        UniqueConstraint("room_id", "artist_id", name="uq_room_invite_once"),
    )

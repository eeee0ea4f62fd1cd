# songpig/models/song.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..db import Base, utcnow
from .enums import ReactionType, SongSourceType, SongStorageType, enum_column_type


class Song(Base):
    __tablename__ = "songs"

    id = Column(String, primary_key=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    url = Column(String, nullable=False)

    uploader_id = Column(String, ForeignKey("users.id"), nullable=False)
    uploader_name = Column(String, nullable=False)

    source_type = Column(
        enum_column_type(SongSourceType), nullable=False, default=SongSourceType.DIRECT
    )
    storage_type = Column(
        enum_column_type(SongStorageType), nullable=False, default=SongStorageType.EXTERNAL
    )
    storage_key = Column(String, nullable=True)

    # 作成順（ペア選出はこの順序に依存する）
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    room = relationship("Room", back_populates="songs")
    comments = relationship(
        "Comment",
        back_populates="song",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True)
    song_id = Column(String, ForeignKey("songs.id"), nullable=False, index=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False, index=True)

    # 匿名コメントでも本当の投稿者は保持する
    author_id = Column(String, ForeignKey("users.id"), nullable=False)
    author_username = Column(String, nullable=False)

    text = Column(Text, nullable=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    # 返信先（1 階層想定だが深さは強制しない）
    parent_comment_id = Column(String, ForeignKey("comments.id"), nullable=True)
    is_hidden = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    song = relationship("Song", back_populates="comments")
    reactions = relationship("CommentReaction", cascade="all, delete-orphan")

    @property
    def display_author(self) -> str:
        return "Anonymous" if self.is_anonymous else self.author_username


class CommentReaction(Base):
    __tablename__ = "comment_reactions"

    id = Column(String, primary_key=True)
    comment_id = Column(String, ForeignKey("comments.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    reaction_type = Column(enum_column_type(ReactionType), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # 1 ユーザー 1 コメントにつきリアクションは 1 つ
    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_reaction_once"),
    )

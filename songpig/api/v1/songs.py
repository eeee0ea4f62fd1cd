# songpig/api/v1/songs.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_current_user, get_db_dep, get_storage_dep, require_user
from ...models.enums import SongStorageType
from ...models.room import Room
from ...models.song import Comment, Song
from ...models.user import User
from ...schemas.song import (
    CommentCreate,
    CommentOut,
    CommentVisibilityUpdate,
    SongCreate,
    SongOut,
)
from ...services import lifecycle
from ...services import rooms as room_service
from ...services.storage import R2Storage

router = APIRouter(prefix="/rooms", tags=["songs"])


# -----------------------------
# レスポンス整形
# -----------------------------

def comment_to_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        song_id=comment.song_id,
        room_id=comment.room_id,
        # 匿名なら投稿者 ID は出さない
        author_id=None if comment.is_anonymous else comment.author_id,
        author_username=comment.display_author,
        text=comment.text,
        is_anonymous=comment.is_anonymous,
        parent_comment_id=comment.parent_comment_id,
        is_hidden=comment.is_hidden,
        created_at=comment.created_at,
    )


def song_to_out(song: Song, include_hidden: bool = False) -> SongOut:
    return SongOut(
        id=song.id,
        room_id=song.room_id,
        title=song.title,
        url=song.url,
        uploader_id=song.uploader_id,
        uploader_name=song.uploader_name,
        source_type=song.source_type,
        storage_type=song.storage_type,
        storage_key=song.storage_key,
        position=song.position,
        created_at=song.created_at,
        comments=[
            comment_to_out(c)
            for c in song.comments
            if include_hidden or not c.is_hidden
        ],
    )


# -----------------------------
# 部屋の取得（共通）
# -----------------------------

def load_visible_room(db: Session, room_id: str, user: Optional[User]) -> Room:
    """見えない部屋は存在しないのと同じ扱い（404）。private は 403"""
    room = room_service.get_room(db, room_id)
    if not room or not lifecycle.can_view_room(room, user):
        raise HTTPException(status_code=404, detail="Room not found")
    if lifecycle.is_private_to(room, user):
        raise HTTPException(status_code=403, detail="You do not have access to this room")
    return room


def load_managed_room(db: Session, room_id: str, user: User, action: str) -> Room:
    room = load_visible_room(db, room_id, user)
    if not lifecycle.is_room_manager(room, user):
        raise HTTPException(
            status_code=403,
            detail=f"Only the room owner or admin can {action}",
        )
    return room


# -----------------------------
# 曲の追加・削除
# -----------------------------

@router.post("/{room_id}/songs", response_model=SongOut, status_code=201)
def add_song(
    room_id: str,
    data: SongCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    room = load_managed_room(db, room_id, user, "add songs")

    title = data.title.strip()
    url = data.url.strip()
    if not title or not url:
        raise HTTPException(status_code=400, detail="Title and URL are required")

    if data.storage_type == SongStorageType.CLOUDFLARE and not data.storage_key:
        raise HTTPException(status_code=400, detail="storage_key is required for cloudflare songs")

    # 2 曲上限（ステータスに関係なく）と draft チェック
    error = lifecycle.song_add_error(room, user, room.song_count)
    if error:
        raise HTTPException(status_code=400, detail=error)

    song = room_service.add_song(
        db,
        room.id,
        title,
        url,
        user,
        source_type=data.source_type,
        storage_type=data.storage_type,
        storage_key=data.storage_key,
    )
    if not song:
        raise HTTPException(status_code=404, detail="Room not found")
    return song_to_out(song)


@router.delete("/{room_id}/songs/{song_id}", status_code=204)
def remove_song(
    room_id: str,
    song_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
    storage: R2Storage = Depends(get_storage_dep),
):
    room = load_managed_room(db, room_id, user, "remove songs")

    if not lifecycle.can_remove_song(room):
        raise HTTPException(status_code=400, detail="Songs can only be removed from draft rooms")

    song = room_service.get_song(db, room.id, song_id)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    storage_key = song.storage_key if song.storage_type == SongStorageType.CLOUDFLARE else None

    if not room_service.remove_song(db, room.id, song_id):
        raise HTTPException(status_code=404, detail="Song not found")

    # R2 上のファイルも消す（失敗してもログだけ）
    if storage_key and storage.is_configured:
        storage.delete(storage_key)
    return


# -----------------------------
# コメント
# -----------------------------

@router.post(
    "/{room_id}/songs/{song_id}/comments",
    response_model=CommentOut,
    status_code=201,
)
def add_comment(
    room_id: str,
    song_id: str,
    data: CommentCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)

    if not lifecycle.accepts_feedback(room):
        raise HTTPException(status_code=403, detail="Room is not accepting feedback")

    text = data.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Comment text is required")

    comment = room_service.add_comment(
        db,
        room.id,
        song_id,
        user,
        text,
        is_anonymous=data.is_anonymous,
        parent_comment_id=data.parent_comment_id,
    )
    if not comment:
        raise HTTPException(status_code=404, detail="Song or parent comment not found")
    return comment_to_out(comment)


@router.patch(
    "/{room_id}/songs/{song_id}/comments/{comment_id}/visibility",
    response_model=CommentOut,
)
def set_comment_visibility(
    room_id: str,
    song_id: str,
    comment_id: str,
    data: CommentVisibilityUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """コメントの非表示・再表示（オーナー / 管理者）"""
    room = load_managed_room(db, room_id, user, "hide comments")

    if not room_service.set_comment_hidden(db, room.id, song_id, comment_id, data.hidden):
        raise HTTPException(status_code=404, detail="Comment not found")

    comment = room_service.get_comment(db, room.id, song_id, comment_id)
    return comment_to_out(comment)


@router.get("/{room_id}/songs/{song_id}", response_model=SongOut)
def get_song(
    room_id: str,
    song_id: str,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)
    song = room_service.get_song(db, room.id, song_id)
    if not song:
        raise HTTPException(status_code=404, detail="Song not found")
    return song_to_out(song, include_hidden=lifecycle.is_room_manager(room, user))

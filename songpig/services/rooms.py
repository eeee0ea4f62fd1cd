# songpig/services/rooms.py
"""
部屋・曲・コメントの読み書き。

ここの関数は想定内の失敗（見つからない・状態が合わない）を
None / False で返す。HTTP ステータスへの変換はルーター側で行う。
"""
import logging
import secrets
import string
import uuid
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..config import settings
from ..db import utcnow
from ..models.comparison import Comparison
from ..models.enums import (
    ReactionType,
    RoomStatus,
    SongSourceType,
    SongStorageType,
    UserRole,
)
from ..models.room import Room, RoomInvite
from ..models.song import Comment, CommentReaction, Song
from ..models.user import User
from . import lifecycle
from .consistency import read_with_retry
from .text import format_room_name, normalize_text

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits

# ステータス指定なしの一覧（管理者以外）は draft + active
DEFAULT_LISTING_STATUSES = (RoomStatus.DRAFT, RoomStatus.ACTIVE)


# -----------------------------
# 部屋
# -----------------------------

def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def invite_code_in_use(db: Session, code: str) -> bool:
    return (
        db.query(Room.id)
        .filter(Room.invite_code == code, Room.status != RoomStatus.DELETED)
        .first()
        is not None
    )


def _allocate_invite_code(db: Session) -> str:
    for _ in range(settings.INVITE_CODE_ATTEMPTS):
        code = generate_invite_code()
        if not invite_code_in_use(db, code):
            return code
        logger.info("invite code collision: %s, regenerating", code)
    raise RuntimeError("could not allocate a unique invite code")


def find_room(db: Session, room_id: str) -> Optional[Room]:
    """1 回だけ取得。DB エラー（タイムアウト等）のときは 1 回だけ再試行する"""
    try:
        return db.get(Room, room_id)
    except OperationalError:
        logger.warning("room fetch failed, retrying once: %s", room_id, exc_info=True)
        db.rollback()
        return db.get(Room, room_id)


def get_room(db: Session, room_id: str) -> Optional[Room]:
    if not room_id:
        return None
    return read_with_retry(lambda: find_room(db, room_id), label=f"room {room_id}")


def get_room_by_invite_code(db: Session, code: str) -> Optional[Room]:
    """削除済み以外から招待コードで探す（ステータスの判定は呼び出し側）"""
    return (
        db.query(Room)
        .filter(
            Room.invite_code == code.strip().upper(),
            Room.status != RoomStatus.DELETED,
        )
        .first()
    )


def create_room(db: Session, name: str, description: str, owner: User) -> Room:
    artist_name = normalize_text(owner.username) if owner.username else "Unknown Artist"

    room = Room(
        id=str(uuid.uuid4()),
        name=format_room_name(name, artist_name),
        description=description or "",
        artist_id=owner.id,
        artist_name=artist_name,
        artist_bio=owner.bio or "",
        invite_code=_allocate_invite_code(db),
        status=RoomStatus.DRAFT,  # 新しい部屋は必ず draft から
    )
    db.add(room)
    db.commit()

    created = read_with_retry(lambda: find_room(db, room.id), label=f"room {room.id}")
    logger.info("room created: id=%s artist=%s status=draft", room.id, owner.id)
    return created or room


def touch_last_accessed(db: Session, room: Room) -> None:
    room.last_accessed = utcnow()
    db.add(room)
    db.commit()


def rooms_for_user(
    db: Session, user: User, status_filter: Optional[str] = None
) -> list[Room]:
    """
    - 管理者: deleted 以外すべて
    - それ以外: 自分の部屋 + （アーティストなら）招待された部屋
    status_filter が "all" 以外ならそのステータスだけ。
    指定なしの場合、管理者以外は draft + active のみ。
    """
    q = db.query(Room).filter(Room.status != RoomStatus.DELETED)

    if user.role != UserRole.ADMIN:
        invited_ids = select(RoomInvite.room_id).where(RoomInvite.artist_id == user.id)
        if user.role == UserRole.ARTIST:
            q = q.filter((Room.artist_id == user.id) | (Room.id.in_(invited_ids)))
        else:
            q = q.filter(Room.artist_id == user.id)

    if status_filter and status_filter != "all":
        q = q.filter(Room.status == RoomStatus(status_filter))
    elif not status_filter and user.role != UserRole.ADMIN:
        q = q.filter(Room.status.in_(DEFAULT_LISTING_STATUSES))

    return q.order_by(Room.created_at.desc()).all()


def reviewer_rooms(db: Session, user: User) -> tuple[list[dict], list[dict]]:
    """
    (starter_rooms, reviewed_rooms) を返す。
    reviewed: 自分が投票した部屋（最新の投票順）と、そのとき選んだ曲
    starter: active な starter 部屋のうち、まだ投票していないもの
    """
    latest_by_room: dict[str, Comparison] = {}
    comparisons = (
        db.query(Comparison)
        .filter(Comparison.user_id == user.id)
        .order_by(Comparison.created_at.desc())
        .all()
    )
    for c in comparisons:
        latest_by_room.setdefault(c.room_id, c)

    handles = {u.id: u.username for u in db.query(User.id, User.username).all()}

    reviewed: list[dict] = []
    if latest_by_room:
        rooms = (
            db.query(Room)
            .filter(Room.id.in_(list(latest_by_room)), Room.status != RoomStatus.DELETED)
            .all()
        )
        for room in rooms:
            latest = latest_by_room[room.id]
            preferred = db.get(Song, latest.winner_id) if latest.winner_id else None
            reviewed.append(
                {
                    "id": room.id,
                    "name": room.name,
                    "artist_name": room.artist_name,
                    "artist_handle": handles.get(room.artist_id),
                    "last_reviewed_at": latest.created_at,
                    "preferred_song_title": preferred.title if preferred else None,
                }
            )
        reviewed.sort(key=lambda r: r["last_reviewed_at"], reverse=True)

    starters = (
        db.query(Room)
        .filter(Room.is_starter_room.is_(True), Room.status == RoomStatus.ACTIVE)
        .order_by(Room.created_at.desc())
        .all()
    )
    starter_rooms = [
        {
            "id": room.id,
            "name": normalize_text(room.name),
            "artist_name": room.artist_name,
            "artist_handle": handles.get(room.artist_id),
            "created_at": room.created_at,
        }
        for room in starters
        if room.id not in latest_by_room
    ]
    return starter_rooms, reviewed


def update_room_status(db: Session, room_id: str, status: RoomStatus) -> bool:
    room = find_room(db, room_id)
    if not room:
        return False

    previous = room.status
    room.status = status
    room.updated_at = utcnow()
    db.add(room)
    db.commit()
    logger.info("room status changed: id=%s %s -> %s", room_id, previous.value, status.value)
    return True


def bulk_update_status(db: Session, room_ids: Iterable[str], status: RoomStatus) -> int:
    """まとめて更新する。見つからない部屋と遷移できない部屋は数えずに飛ばす"""
    updated = 0
    for room_id in room_ids:
        room = find_room(db, room_id)
        if not room:
            continue
        error = lifecycle.status_change_error(room, status, room.song_count)
        if error:
            logger.info("bulk status skipped: id=%s %s", room_id, error)
            continue
        if update_room_status(db, room_id, status):
            updated += 1
    return updated


def update_room_meta(db: Session, room: Room, updates: dict) -> Room:
    for key, value in updates.items():
        setattr(room, key, value)
    room.updated_at = utcnow()
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


def invite_artist(db: Session, room: Room, artist_id: str, inviter_id: str) -> bool:
    # 招待できるのはオーナーだけ。オーナー自身や招待済みは False
    if room.artist_id != inviter_id:
        return False
    if artist_id == room.artist_id or artist_id in room.invited_artist_ids:
        return False

    db.add(RoomInvite(id=str(uuid.uuid4()), room_id=room.id, artist_id=artist_id))
    db.commit()
    db.refresh(room)
    return True


# -----------------------------
# 曲
# -----------------------------

def add_song(
    db: Session,
    room_id: str,
    title: str,
    url: str,
    uploader: User,
    source_type: SongSourceType = SongSourceType.DIRECT,
    storage_type: SongStorageType = SongStorageType.EXTERNAL,
    storage_key: Optional[str] = None,
) -> Optional[Song]:
    """
    曲を追加する。2 曲上限のチェックは呼び出し側の責任
    （lifecycle.song_add_error を先に通すこと）。
    """
    room = find_room(db, room_id)
    if not room:
        return None

    last_position = (
        db.query(func.max(Song.position)).filter(Song.room_id == room_id).scalar()
    )

    song = Song(
        id=str(uuid.uuid4()),
        room_id=room_id,
        title=title,
        url=url,
        uploader_id=uploader.id,
        uploader_name=uploader.username,
        source_type=source_type,
        storage_type=storage_type,
        storage_key=storage_key,
        position=(last_position or 0) + 1,
    )
    db.add(song)
    room.updated_at = utcnow()
    db.add(room)
    db.commit()
    db.refresh(song)
    db.refresh(room)

    logger.info("song added: room=%s song=%s storage=%s", room_id, song.id, storage_type.value)
    return song


def get_song(db: Session, room_id: str, song_id: str) -> Optional[Song]:
    song = db.get(Song, song_id)
    if not song or song.room_id != room_id:
        return None
    return song


def remove_song(db: Session, room_id: str, song_id: str) -> bool:
    room = find_room(db, room_id)
    if not room:
        return False

    # 比較履歴を守るため draft 以外では消さない
    if room.status != RoomStatus.DRAFT:
        return False

    song = get_song(db, room_id, song_id)
    if not song:
        return False

    db.query(Comparison).filter(
        Comparison.room_id == room_id,
        (Comparison.song_a_id == song_id) | (Comparison.song_b_id == song_id),
    ).delete(synchronize_session=False)

    db.delete(song)
    room.updated_at = utcnow()
    db.add(room)
    db.commit()
    db.refresh(room)

    logger.info("song removed: room=%s song=%s", room_id, song_id)
    return True


# -----------------------------
# コメント
# -----------------------------

def add_comment(
    db: Session,
    room_id: str,
    song_id: str,
    author: User,
    text: str,
    is_anonymous: bool = False,
    parent_comment_id: Optional[str] = None,
) -> Optional[Comment]:
    song = get_song(db, room_id, song_id)
    if not song:
        return None

    if parent_comment_id:
        parent = db.get(Comment, parent_comment_id)
        if not parent or parent.song_id != song_id:
            return None

    comment = Comment(
        id=str(uuid.uuid4()),
        song_id=song_id,
        room_id=room_id,
        author_id=author.id,
        author_username=author.username,
        text=text,
        is_anonymous=is_anonymous,
        parent_comment_id=parent_comment_id,
        is_hidden=False,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def get_comment(db: Session, room_id: str, song_id: str, comment_id: str) -> Optional[Comment]:
    comment = db.get(Comment, comment_id)
    if not comment or comment.room_id != room_id or comment.song_id != song_id:
        return None
    return comment


def set_comment_hidden(
    db: Session, room_id: str, song_id: str, comment_id: str, hide: bool
) -> bool:
    comment = get_comment(db, room_id, song_id, comment_id)
    if not comment:
        return False

    comment.is_hidden = hide
    comment.updated_at = utcnow()
    db.add(comment)
    db.commit()
    return True


def toggle_reaction(
    db: Session, comment: Comment, user_id: str, reaction_type: ReactionType
) -> str:
    """
    - 同じリアクション → 取り消し（"removed"）
    - 別のリアクション → 置き換え（"changed"）
    - なし → 追加（"added"）
    """
    existing: CommentReaction | None = (
        db.query(CommentReaction)
        .filter(
            CommentReaction.comment_id == comment.id,
            CommentReaction.user_id == user_id,
        )
        .one_or_none()
    )

    if existing and existing.reaction_type == reaction_type:
        db.delete(existing)
        action = "removed"
    elif existing:
        existing.reaction_type = reaction_type
        db.add(existing)
        action = "changed"
    else:
        db.add(
            CommentReaction(
                id=str(uuid.uuid4()),
                comment_id=comment.id,
                user_id=user_id,
                reaction_type=reaction_type,
            )
        )
        action = "added"

    db.commit()
    return action


def reaction_summary(db: Session, comment_id: str) -> dict:
    rows = (
        db.query(CommentReaction.reaction_type, CommentReaction.user_id)
        .filter(CommentReaction.comment_id == comment_id)
        .all()
    )

    counts: dict[str, int] = {}
    user_reactions: dict[str, list[str]] = {}
    for reaction_type, user_id in rows:
        counts[reaction_type.value] = counts.get(reaction_type.value, 0) + 1
        user_reactions.setdefault(user_id, []).append(reaction_type.value)

    return {"counts": counts, "user_reactions": user_reactions, "total": len(rows)}

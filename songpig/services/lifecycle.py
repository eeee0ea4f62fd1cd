# songpig/services/lifecycle.py
"""
部屋のステータス遷移と、ステータスに依存する権限判定。

    draft → active ⇄ archived
    draft / active / archived → deleted（管理者のステータス更新でのみ復帰）

遷移そのものはどの組み合わせでも技術的には可能で、
ここでは呼び出し側（ルーター）が使う判定だけを提供する。
"""
from typing import Optional

from ..models.enums import AccessType, RoomStatus, UserRole
from ..models.room import Room
from ..models.user import User

MAX_SONGS_PER_ROOM = 2
# active にするのに必要な曲数
REQUIRED_SONGS_TO_ACTIVATE = 2


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == UserRole.ADMIN


def is_owner(room: Room, user: Optional[User]) -> bool:
    return user is not None and room.artist_id == user.id


def is_room_manager(room: Room, user: Optional[User]) -> bool:
    """ステータス・メタデータ・曲を操作できるのはオーナーか管理者だけ"""
    return is_owner(room, user) or is_admin(user)


def is_invited_artist(room: Room, user: Optional[User]) -> bool:
    return (
        user is not None
        and user.role == UserRole.ARTIST
        and user.id in room.invited_artist_ids
    )


def can_view_room(room: Room, user: Optional[User]) -> bool:
    """
    閲覧可否:
    - 管理者: どのステータスでも見える
    - オーナー: deleted 以外
    - 招待アーティスト: draft / deleted 以外
    - それ以外（ゲスト含む）: active のみ
    """
    if is_admin(user):
        return True
    if room.status == RoomStatus.DELETED:
        return False
    if is_owner(room, user):
        return True
    if room.status == RoomStatus.DRAFT:
        return False
    if is_invited_artist(room, user):
        return True
    return room.status == RoomStatus.ACTIVE


def is_private_to(room: Room, user: Optional[User]) -> bool:
    """private な部屋は管理者・オーナー・招待アーティスト以外には 403"""
    if room.access_type != AccessType.PRIVATE:
        return False
    return not (is_room_manager(room, user) or is_invited_artist(room, user))


def status_change_error(room: Room, target: RoomStatus, song_count: int) -> Optional[str]:
    """遷移できない理由を返す（問題なければ None）"""
    if (
        target == RoomStatus.ACTIVE
        and room.status != RoomStatus.ACTIVE
        and song_count != REQUIRED_SONGS_TO_ACTIVATE
    ):
        return (
            f"Room needs exactly {REQUIRED_SONGS_TO_ACTIVATE} songs to become active "
            f"(has {song_count})"
        )
    return None


def song_add_error(room: Room, user: Optional[User], song_count: int) -> Optional[str]:
    # 上限はステータスに関係なく常にチェック
    if song_count >= MAX_SONGS_PER_ROOM:
        return f"Room already has {MAX_SONGS_PER_ROOM} songs"
    # 管理者はいつでも追加できる
    if not is_admin(user) and room.status != RoomStatus.DRAFT:
        return "Songs can only be added to draft rooms"
    return None


def can_remove_song(room: Room) -> bool:
    # 比較履歴を守るため、削除は draft のときだけ
    return room.status == RoomStatus.DRAFT


def can_edit_metadata(room: Room, user: Optional[User]) -> bool:
    return is_room_manager(room, user) and room.status == RoomStatus.DRAFT


def accepts_feedback(room: Room) -> bool:
    """コメント・投票を受け付けるのは active の部屋だけ"""
    return room.status == RoomStatus.ACTIVE

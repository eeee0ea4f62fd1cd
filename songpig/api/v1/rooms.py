# songpig/api/v1/rooms.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...api.deps import get_current_user, get_db_dep, require_user
from ...models.enums import RoomStatus, UserRole
from ...models.room import Room
from ...models.user import User
from ...schemas.room import (
    BulkStatusOut,
    BulkStatusRequest,
    ReviewedRoomItem,
    ReviewerRoomsOut,
    RoomCreate,
    RoomInviteCreate,
    RoomMetaUpdate,
    RoomOut,
    RoomStatusUpdate,
    RoomSummaryOut,
    StarterRoomItem,
    StatusFilterLiteral,
)
from ...services import lifecycle
from ...services import rooms as room_service
from ...services.users import get_user
from .songs import load_managed_room, load_visible_room, song_to_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


def room_to_out(room: Room, viewer: Optional[User]) -> RoomOut:
    manager = lifecycle.is_room_manager(room, viewer)
    summary = RoomSummaryOut.model_validate(room)
    return RoomOut(
        **summary.model_dump(),
        artist_bio=room.artist_bio,
        # 招待リストはオーナー / 管理者にだけ見せる
        invited_artist_ids=room.invited_artist_ids if manager else [],
        songs=[song_to_out(s, include_hidden=manager) for s in room.songs],
    )


# -----------------------------
# 一覧・作成
# -----------------------------

@router.get("", response_model=list[RoomSummaryOut])
def list_rooms(
    status: Optional[StatusFilterLiteral] = Query(default=None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    return room_service.rooms_for_user(db, user, status)


@router.post("", response_model=RoomOut, status_code=201)
def create_room(
    data: RoomCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    if user.role not in (UserRole.ARTIST, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Only artists can create rooms")

    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Room name is required")

    room = room_service.create_room(db, name, data.description or "", user)
    return room_to_out(room, user)


# -----------------------------
# 固定パス（/{room_id} より先に定義する）
# -----------------------------

@router.get("/reviewer", response_model=ReviewerRoomsOut)
def reviewer_rooms(
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """投票済みの部屋と、まだ投票していない starter 部屋"""
    starter, reviewed = room_service.reviewer_rooms(db, user)
    return ReviewerRoomsOut(
        role=user.role.value,
        starter_rooms=[StarterRoomItem(**r) for r in starter],
        reviewed_rooms=[ReviewedRoomItem(**r) for r in reviewed],
    )


@router.patch("/bulk_status", response_model=BulkStatusOut)
def bulk_status(
    data: BulkStatusRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    if not lifecycle.is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    if not data.room_ids:
        raise HTTPException(status_code=400, detail="room_ids array is required")

    updated = room_service.bulk_update_status(db, data.room_ids, data.status)
    return BulkStatusOut(
        success=True,
        updated=updated,
        message=f"Updated {updated} room(s) to {data.status.value}",
    )


@router.get("/invite/{code}", response_model=RoomOut)
def get_room_by_invite(
    code: str,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_dep),
):
    room = room_service.get_room_by_invite_code(db, code)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    # 招待コードで入れるのは active の部屋だけ（オーナー / 管理者は別）
    if room.status != RoomStatus.ACTIVE and not lifecycle.is_room_manager(room, user):
        raise HTTPException(status_code=403, detail="Room is not active")
    return room_to_out(room, user)


# -----------------------------
# 個別の部屋
# -----------------------------

@router.get("/{room_id}", response_model=RoomOut)
def get_room(
    room_id: str,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)

    if user is not None and not lifecycle.is_admin(user):
        room_service.touch_last_accessed(db, room)
    return room_to_out(room, user)


@router.patch("/{room_id}/status", response_model=RoomOut)
def update_status(
    room_id: str,
    data: RoomStatusUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    room = load_managed_room(db, room_id, user, "change status")

    error = lifecycle.status_change_error(room, data.status, room.song_count)
    if error:
        raise HTTPException(status_code=400, detail=error)

    if not room_service.update_room_status(db, room.id, data.status):
        raise HTTPException(status_code=404, detail="Room not found")

    db.refresh(room)
    return room_to_out(room, user)


@router.patch("/{room_id}/meta", response_model=RoomOut)
def update_meta(
    room_id: str,
    data: RoomMetaUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """
    - name / description: オーナー or 管理者、draft のときだけ
    - is_starter_room: 管理者のみ（ステータス不問）
    """
    room = load_managed_room(db, room_id, user, "edit room metadata")

    updates: dict = {}
    if data.name is not None and data.name.strip():
        updates["name"] = data.name.strip()
    if data.description is not None:
        updates["description"] = data.description

    if updates and not lifecycle.can_edit_metadata(room, user):
        raise HTTPException(
            status_code=400,
            detail="Room metadata can only be edited while the room is a draft",
        )

    if data.is_starter_room is not None:
        if not lifecycle.is_admin(user):
            raise HTTPException(
                status_code=403,
                detail="Admin access required to change starter room flag",
            )
        updates["is_starter_room"] = data.is_starter_room

    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    room = room_service.update_room_meta(db, room, updates)
    return room_to_out(room, user)


@router.post("/{room_id}/invites", response_model=RoomOut, status_code=201)
def invite_artist(
    room_id: str,
    data: RoomInviteCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)
    if not lifecycle.is_owner(room, user):
        raise HTTPException(status_code=403, detail="Only the room owner can invite artists")

    invitee = get_user(db, data.artist_id)
    if not invitee or invitee.role != UserRole.ARTIST:
        raise HTTPException(status_code=400, detail="Only artists can be invited")

    if not room_service.invite_artist(db, room, invitee.id, user.id):
        raise HTTPException(status_code=409, detail="Artist is already invited")

    logger.info("artist invited: room=%s artist=%s", room.id, invitee.id)
    return room_to_out(room, user)

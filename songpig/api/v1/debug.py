# songpig/api/v1/debug.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep
from ...config import settings
from ...db import Base, engine
from ...models.enums import RoomStatus, UserRole
from ...services import rooms as room_service
from ...services.users import create_user, seed_default_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debug", tags=["debug"])

DEBUG_PASSWORD = "password123"


class DebugSeedRequest(BaseModel):
    room_name: str | None = None
    song_titles: list[str] | None = None
    activate: bool = True


def require_debug_enabled() -> None:
    # 本番では存在しないのと同じ扱い
    if not settings.DEBUG_ENDPOINTS:
        raise HTTPException(status_code=404, detail="Not Found")


@router.post("/reset_and_seed", dependencies=[Depends(require_debug_enabled)])
def reset_and_seed(
    data: DebugSeedRequest,
    db: Session = Depends(get_db_dep),
):
    # DB 全消し（開発専用）
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    admin = seed_default_admin(db)
    artist = create_user(db, "debug_artist", DEBUG_PASSWORD, role=UserRole.ARTIST)
    listener = create_user(db, "debug_listener", DEBUG_PASSWORD, role=UserRole.LISTENER)

    room = room_service.create_room(db, data.room_name or "Debug Room", "", artist)

    titles = data.song_titles or ["Version A", "Version B"]
    for idx, title in enumerate(titles[:2]):
        room_service.add_song(
            db, room.id, title, f"https://example.com/debug/{idx + 1}.mp3", artist
        )

    if data.activate and len(titles) >= 2:
        room_service.update_room_status(db, room.id, RoomStatus.ACTIVE)

    db.refresh(room)
    logger.info("debug seed: room=%s status=%s", room.id, room.status.value)

    return {
        "room_id": room.id,
        "invite_code": room.invite_code,
        "status": room.status.value,
        "song_ids": [s.id for s in room.songs],
        "users": {
            "admin": admin.id if admin else None,
            "artist": artist.id,
            "listener": listener.id,
        },
        "password": DEBUG_PASSWORD,
    }

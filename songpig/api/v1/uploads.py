# songpig/api/v1/uploads.py

import logging
import os

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, get_storage_dep, require_user
from ...models.enums import UserRole
from ...models.user import User
from ...schemas.upload import UploadUrlOut, UploadUrlRequest
from ...services.storage import (
    R2Storage,
    extension_for_type,
    generate_storage_key,
    is_supported_audio_type,
)
from .songs import load_managed_room

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/cloudflare", response_model=UploadUrlOut)
def create_upload_url(
    data: UploadUrlRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
    storage: R2Storage = Depends(get_storage_dep),
):
    """
    R2 への PUT 用署名付き URL を発行する。
    クライアントは upload_url にファイルを PUT し、
    storage_key / public_url を付けて曲を追加する。
    """
    if user.role not in (UserRole.ARTIST, UserRole.ADMIN):
        raise HTTPException(status_code=403, detail="Only artists can upload files")

    if not storage.is_configured:
        raise HTTPException(status_code=503, detail="Cloud storage is not configured")

    if not data.room_id or not data.file_name:
        raise HTTPException(status_code=400, detail="room_id and file_name are required")

    room = load_managed_room(db, data.room_id, user, "upload songs")

    if not is_supported_audio_type(data.content_type):
        raise HTTPException(
            status_code=400,
            detail="Unsupported audio format. Supported: MP3, WAV, AIFF, FLAC, OGG, WebM, M4A",
        )

    # 元の拡張子は捨てて Content-Type に合わせる
    base_name, _ = os.path.splitext(data.file_name)
    storage_key = generate_storage_key(
        room.id, f"{base_name}{extension_for_type(data.content_type)}"
    )

    upload_url = storage.upload_url(storage_key, data.content_type)
    logger.info("upload url issued: room=%s key=%s", room.id, storage_key)

    return UploadUrlOut(
        upload_url=upload_url,
        storage_key=storage_key,
        public_url=storage.public_url(storage_key),
        content_type=data.content_type,
    )

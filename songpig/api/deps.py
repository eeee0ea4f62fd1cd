# songpig/api/deps.py

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from songpig.config import settings
from songpig.db import SessionLocal
from songpig.models.enums import UserStatus
from songpig.models.user import User
from songpig.security import decode_token
from songpig.services.storage import R2Storage
from songpig.services.users import get_user


def get_db_dep() -> Generator[Session, None, None]:
    """
    FastAPI の Depends で使う DB セッション依存関数。
    エンドポイント側では `db: Session = Depends(get_db_dep)` で利用。
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db_dep),
) -> Optional[User]:
    """
    Authorization: Bearer <token> を検証してユーザーを返す。
    ヘッダーなしはゲスト（None）。不正なトークンは 401。
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    user_id = decode_token(token.strip())
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = get_user(db, user_id)
    if not user or user.status != UserStatus.ACTIVE:
        raise HTTPException(status_code=401, detail="User is not active")
    return user


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def get_storage_dep() -> R2Storage:
    return R2Storage(settings)

# songpig/api/v1/users.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, require_user
from ...models.enums import UserRole
from ...models.user import User
from ...schemas.user import UserOut, UserPublicOut, UserUpdate
from ...services.users import (
    AdminProtected,
    UsernameTaken,
    get_user,
    list_users,
    update_user,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
def get_users(
    current: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """ユーザー一覧（管理者のみ）"""
    if current.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return list_users(db)


@router.get("/{user_id}", response_model=UserPublicOut)
def get_public_user(
    user_id: str,
    db: Session = Depends(get_db_dep),
):
    user = get_user(db, user_id)
    # 論理削除済みも 404
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserOut)
def patch_user(
    user_id: str,
    data: UserUpdate,
    current: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """
    - 本人: username / bio のみ変更可（role / status を送ったら 403）
    - 管理者: すべて変更可。ただし管理者アカウントの降格・無効化は 400
    """
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    is_admin = current.role == UserRole.ADMIN
    is_self = current.id == user.id

    if not is_admin:
        if not is_self:
            raise HTTPException(status_code=403, detail="Admin access required for this operation")
        if data.role is not None or data.status is not None:
            raise HTTPException(status_code=403, detail="Cannot change role or status")

    updates = data.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    try:
        return update_user(db, user, updates)
    except AdminProtected as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UsernameTaken:
        raise HTTPException(status_code=409, detail="Username already exists")

# songpig/schemas/user.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..models.enums import UserRole, UserStatus


class RegisterRequest(BaseModel):
    username: str
    password: str
    email: Optional[str] = None
    # "artist" 以外はすべて listener 扱い（admin は登録できない）
    role: Optional[str] = None


class LoginRequest(BaseModel):
    """identifier が新形式、username は古いクライアント向け"""
    identifier: Optional[str] = None
    username: Optional[str] = None
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    role: UserRole
    status: UserStatus
    bio: str = ""
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserPublicOut(BaseModel):
    """GET /api/users/{id} 用（公開情報のみ）"""
    id: str
    username: str
    role: UserRole
    bio: str = ""

    class Config:
        from_attributes = True


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class UserUpdate(BaseModel):
    username: Optional[str] = None
    bio: Optional[str] = None
    # 以下は管理者のみ
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

# songpig/services/users.py
import logging
import uuid
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config import settings
from ..db import utcnow
from ..models.enums import UserRole, UserStatus
from ..models.user import User
from ..security import hash_password, verify_password
from .consistency import read_with_retry

logger = logging.getLogger(__name__)


class UsernameTaken(Exception):
    """削除済み以外のユーザーとユーザー名が重複した"""


class AdminProtected(Exception):
    """管理者アカウントの降格・無効化は不可"""


def get_user(db: Session, user_id: str) -> Optional[User]:
    user = db.get(User, user_id)
    if not user or user.status == UserStatus.DELETED:
        return None
    return user


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return (
        db.query(User)
        .filter(
            func.lower(User.username) == username.strip().lower(),
            User.status != UserStatus.DELETED,
        )
        .first()
    )


def create_user(
    db: Session,
    username: str,
    password: str,
    email: Optional[str] = None,
    role: UserRole = UserRole.LISTENER,
) -> User:
    if get_user_by_username(db, username):
        raise UsernameTaken(username)

    user = User(
        id=str(uuid.uuid4()),
        username=username.strip(),
        email=email.strip() if email else None,
        password_hash=hash_password(password),
        role=role,
        status=UserStatus.ACTIVE,
        bio="",
    )
    db.add(user)
    db.commit()

    # 作成直後に読めるまで待つ
    created = read_with_retry(lambda: get_user(db, user.id), label=f"user {user.id}")
    logger.info("user created: id=%s username=%s role=%s", user.id, user.username, role.value)
    return created or user


def authenticate(db: Session, username: str, password: str) -> Optional[User]:
    user = get_user_by_username(db, username)
    if not user:
        return None

    # disabled / deleted はログイン不可
    if user.status != UserStatus.ACTIVE:
        logger.info("login attempt for inactive user: %s status=%s", username, user.status.value)
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user: User, updates: dict) -> User:
    """
    updates に入っているキーだけ反映する。
    - 管理者の role / status は変更不可（AdminProtected）
    - username の重複は UsernameTaken
    """
    if user.role == UserRole.ADMIN:
        role = updates.get("role")
        if role is not None and role != UserRole.ADMIN:
            raise AdminProtected("Cannot change admin role")
        status = updates.get("status")
        if status is not None and status != UserStatus.ACTIVE:
            raise AdminProtected("Cannot disable or delete admin accounts")

    new_name = updates.get("username")
    if new_name is not None and new_name != user.username:
        existing = get_user_by_username(db, new_name)
        if existing and existing.id != user.id:
            raise UsernameTaken(new_name)
        updates["username"] = new_name.strip()

    for key, value in updates.items():
        setattr(user, key, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user updated: id=%s fields=%s", user.id, sorted(updates))
    return user


def list_users(db: Session) -> list[User]:
    return (
        db.query(User)
        .filter(User.status != UserStatus.DELETED)
        .order_by(User.created_at)
        .all()
    )


def seed_default_admin(db: Session) -> Optional[User]:
    """
    管理者が 1 人もいなければ初期管理者を作る。
    何度呼んでも結果は同じ（起動時に 1 回呼ぶ想定）。
    """
    existing = (
        db.query(User)
        .filter(User.role == UserRole.ADMIN, User.status != UserStatus.DELETED)
        .first()
    )
    if existing:
        return None

    try:
        admin = create_user(
            db,
            settings.DEFAULT_ADMIN_USERNAME,
            settings.DEFAULT_ADMIN_PASSWORD,
            role=UserRole.ADMIN,
        )
    except UsernameTaken:
        logger.warning(
            "default admin not created: username %r is already used by a non-admin",
            settings.DEFAULT_ADMIN_USERNAME,
        )
        return None

    logger.info("default admin user created: username=%s", admin.username)
    return admin

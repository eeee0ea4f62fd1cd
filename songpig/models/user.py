# songpig/models/user.py

from sqlalchemy import Column, String, Text, DateTime

from ..db import Base, utcnow
from .enums import UserRole, UserStatus, enum_column_type


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    username = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    role = Column(enum_column_type(UserRole), nullable=False, default=UserRole.LISTENER)
    status = Column(enum_column_type(UserStatus), nullable=False, default=UserStatus.ACTIVE)
    bio = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

# songpig/models/enums.py
import enum

from sqlalchemy import Enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    ARTIST = "artist"
    LISTENER = "listener"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    DELETED = "deleted"


class RoomStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class AccessType(str, enum.Enum):
    PRIVATE = "private"
    INVITED_ARTISTS = "invited-artists"
    INVITE_CODE = "invite-code"


class SongSourceType(str, enum.Enum):
    DIRECT = "direct"
    SOUNDCLOUD = "soundcloud"
    SOUNDCLOUD_EMBED = "soundcloud_embed"


class SongStorageType(str, enum.Enum):
    EXTERNAL = "external"
    CLOUDFLARE = "cloudflare"


class ReactionType(str, enum.Enum):
    LIKE = "like"
    LOVE = "love"
    INSIGHTFUL = "insightful"
    FIRE = "fire"


def enum_column_type(enum_cls: type[enum.Enum]) -> Enum:
    """値（"draft" など）をそのまま VARCHAR に保存する Enum 型"""
    return Enum(
        enum_cls,
        native_enum=False,
        validate_strings=True,
        length=32,
        values_callable=lambda e: [m.value for m in e],
    )

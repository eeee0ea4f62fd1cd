# tests/test_lifecycle.py

from songpig.models.enums import AccessType, RoomStatus, UserRole
from songpig.models.room import Room, RoomInvite
from songpig.models.user import User
from songpig.services import lifecycle


def _user(user_id: str, role: UserRole) -> User:
    return User(id=user_id, username=user_id, role=role)


def _room(status: RoomStatus, access_type: AccessType = AccessType.INVITE_CODE) -> Room:
    room = Room(
        id="room-1",
        name="Demo - Owner",
        artist_id="owner",
        invite_code="ABC123",
        status=status,
        access_type=access_type,
    )
    room.invites.append(RoomInvite(id="inv-1", room_id="room-1", artist_id="guest-artist"))
    return room


OWNER = _user("owner", UserRole.ARTIST)
ADMIN = _user("admin", UserRole.ADMIN)
INVITED = _user("guest-artist", UserRole.ARTIST)
LISTENER = _user("listener", UserRole.LISTENER)


def test_draft_visible_only_to_owner_and_admin():
    room = _room(RoomStatus.DRAFT)
    assert lifecycle.can_view_room(room, OWNER)
    assert lifecycle.can_view_room(room, ADMIN)
    assert not lifecycle.can_view_room(room, INVITED)
    assert not lifecycle.can_view_room(room, LISTENER)
    assert not lifecycle.can_view_room(room, None)


def test_deleted_visible_only_to_admin():
    room = _room(RoomStatus.DELETED)
    assert lifecycle.can_view_room(room, ADMIN)
    assert not lifecycle.can_view_room(room, OWNER)
    assert not lifecycle.can_view_room(room, LISTENER)


def test_archived_visible_to_owner_and_invited_only():
    room = _room(RoomStatus.ARCHIVED)
    assert lifecycle.can_view_room(room, OWNER)
    assert lifecycle.can_view_room(room, INVITED)
    assert not lifecycle.can_view_room(room, LISTENER)


def test_active_visible_to_everyone_but_private_blocks_outsiders():
    room = _room(RoomStatus.ACTIVE)
    assert lifecycle.can_view_room(room, None)
    assert not lifecycle.is_private_to(room, LISTENER)

    private = _room(RoomStatus.ACTIVE, AccessType.PRIVATE)
    assert lifecycle.is_private_to(private, LISTENER)
    assert lifecycle.is_private_to(private, None)
    assert not lifecycle.is_private_to(private, INVITED)
    assert not lifecycle.is_private_to(private, OWNER)


def test_activation_requires_exactly_two_songs():
    room = _room(RoomStatus.DRAFT)
    assert lifecycle.status_change_error(room, RoomStatus.ACTIVE, 1) is not None
    assert lifecycle.status_change_error(room, RoomStatus.ACTIVE, 2) is None
    # active 以外への遷移は曲数と無関係
    assert lifecycle.status_change_error(room, RoomStatus.ARCHIVED, 0) is None


def test_song_ceiling_applies_in_every_status():
    for status in RoomStatus:
        room = _room(status)
        assert lifecycle.song_add_error(room, ADMIN, 2) == "Room already has 2 songs"


def test_songs_added_to_draft_only_unless_admin():
    room = _room(RoomStatus.ACTIVE)
    assert lifecycle.song_add_error(room, OWNER, 1) == "Songs can only be added to draft rooms"
    assert lifecycle.song_add_error(room, ADMIN, 1) is None
    assert lifecycle.song_add_error(_room(RoomStatus.DRAFT), OWNER, 1) is None


def test_feedback_and_metadata_rules():
    assert lifecycle.accepts_feedback(_room(RoomStatus.ACTIVE))
    assert not lifecycle.accepts_feedback(_room(RoomStatus.ARCHIVED))
    assert not lifecycle.accepts_feedback(_room(RoomStatus.DRAFT))

    assert lifecycle.can_edit_metadata(_room(RoomStatus.DRAFT), OWNER)
    assert not lifecycle.can_edit_metadata(_room(RoomStatus.ACTIVE), OWNER)
    assert not lifecycle.can_edit_metadata(_room(RoomStatus.DRAFT), LISTENER)

    assert lifecycle.can_remove_song(_room(RoomStatus.DRAFT))
    assert not lifecycle.can_remove_song(_room(RoomStatus.ACTIVE))

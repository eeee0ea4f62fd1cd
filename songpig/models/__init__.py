from .user import User
from .room import Room, RoomInvite
from .song import Song, Comment, CommentReaction
from .comparison import Comparison

__all__ = [
    "User",
    "Room",
    "RoomInvite",
    "Song",
    "Comment",
    "CommentReaction",
    "Comparison",
]

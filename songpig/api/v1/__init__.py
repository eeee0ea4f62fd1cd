# songpig/api/v1/__init__.py

from fastapi import APIRouter

from . import artist, auth, comments, comparisons, debug, rooms, songs, uploads, users

api_router = APIRouter()

# それぞれの router 側で prefix を持っている前提にする
api_router.include_router(auth.router)         # prefix="/auth"
api_router.include_router(users.router)        # prefix="/users"
# rooms を先に登録する（/rooms/reviewer などの固定パス）
api_router.include_router(rooms.router)        # prefix="/rooms"
api_router.include_router(songs.router)        # prefix="/rooms"（曲・コメント）
api_router.include_router(comparisons.router)  # prefix="/rooms"（投票・勝率）
api_router.include_router(comments.router)     # prefix="/comments"
api_router.include_router(uploads.router)      # prefix="/uploads"
api_router.include_router(artist.router)       # prefix="/artist"
api_router.include_router(debug.router)        # prefix="/debug"

# songpig/api/v1/comparisons.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...api.deps import get_current_user, get_db_dep, require_user
from ...models.user import User
from ...schemas.comparison import ComparePairOut, VoteCreate, VoteOut, WinRateOut
from ...services import lifecycle
from ...services import rooms as room_service
from ...services import votes
from .songs import load_visible_room, song_to_out

router = APIRouter(prefix="/rooms", tags=["comparisons"])


@router.post("/{room_id}/compare", response_model=VoteOut)
def vote(
    room_id: str,
    data: VoteCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """
    A/B 投票。同じペアへの再投票は上書き（1 ユーザー 1 ペア 1 票）
    """
    room = load_visible_room(db, room_id, user)

    if not lifecycle.accepts_feedback(room):
        raise HTTPException(status_code=403, detail="Room is not accepting feedback")

    if data.winner_id not in (data.song_a_id, data.song_b_id):
        raise HTTPException(
            status_code=400,
            detail="winner_id must be either song_a_id or song_b_id",
        )
    if data.song_a_id == data.song_b_id:
        raise HTTPException(status_code=400, detail="Cannot compare a song with itself")

    if not votes.record_vote(
        db, room, data.song_a_id, data.song_b_id, data.winner_id, user.id
    ):
        raise HTTPException(status_code=400, detail="Songs do not belong to this room")
    return VoteOut(success=True)


@router.get("/{room_id}/compare", response_model=ComparePairOut)
def next_pair(
    room_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)

    pair = votes.next_comparison_pair(db, room, user.id)
    if pair is None:
        # 2 曲そろっていない部屋
        return ComparePairOut()

    song_a, song_b = pair
    include_hidden = lifecycle.is_room_manager(room, user)
    return ComparePairOut(
        song_a=song_to_out(song_a, include_hidden=include_hidden),
        song_b=song_to_out(song_b, include_hidden=include_hidden),
    )


@router.get("/{room_id}/winrate/{song_id}", response_model=WinRateOut)
def get_win_rate(
    room_id: str,
    song_id: str,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_dep),
):
    room = load_visible_room(db, room_id, user)
    if not room_service.get_song(db, room.id, song_id):
        raise HTTPException(status_code=404, detail="Song not found")

    result = votes.win_rate(db, room.id, song_id)
    return WinRateOut(**result._asdict())

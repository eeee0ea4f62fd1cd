# songpig/api/v1/comments.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ...api.deps import get_current_user, get_db_dep, require_user
from ...models.song import Comment
from ...models.user import User
from ...schemas.song import ReactionCreate, ReactionSummaryOut, ReactionToggleOut
from ...services import rooms as room_service
from .songs import load_visible_room

router = APIRouter(prefix="/comments", tags=["comments"])


def _load_comment(db: Session, comment_id: str, user: Optional[User]) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    # 部屋が見えないならコメントも見えない
    load_visible_room(db, comment.room_id, user)
    return comment


@router.get("/{comment_id}/reactions", response_model=ReactionSummaryOut)
def get_reactions(
    comment_id: str,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db_dep),
):
    comment = _load_comment(db, comment_id, user)
    return room_service.reaction_summary(db, comment.id)


@router.post("/{comment_id}/reactions", response_model=ReactionToggleOut)
def toggle_reaction(
    comment_id: str,
    data: ReactionCreate,
    response: Response,
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """
    同じリアクションをもう一度送ると取り消し、別の種類なら置き換え。
    新規追加のときだけ 201。
    """
    comment = _load_comment(db, comment_id, user)

    action = room_service.toggle_reaction(db, comment, user.id, data.reaction_type)
    if action == "added":
        response.status_code = 201
    return ReactionToggleOut(action=action, reaction_type=data.reaction_type)

# songpig/api/v1/artist.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...api.deps import get_db_dep, require_user
from ...models.user import User
from ...schemas.artist import ArtistStatsOut
from ...services.stats import artist_stats

router = APIRouter(prefix="/artist", tags=["artist"])


@router.get("/stats", response_model=ArtistStatsOut)
def get_artist_stats(
    user: User = Depends(require_user),
    db: Session = Depends(get_db_dep),
):
    """自分の部屋の件数・最近のコメント・曲ごとの勝率"""
    return artist_stats(db, user.id)

# songpig/services/votes.py
import logging
import uuid
from typing import Iterable, NamedTuple, Optional

from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..db import utcnow
from ..models.comparison import Comparison
from ..models.room import Room
from ..models.song import Song
from .pairing import next_pair, pair_key

logger = logging.getLogger(__name__)


class WinRate(NamedTuple):
    win_rate: float
    wins: int
    losses: int


# ON CONFLICT を持つ方言ごとの insert
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect not in UPSERT_INSERTS:
        raise NotImplementedError(f"Vote upsert is not supported on dialect '{dialect}'")
    return UPSERT_INSERTS[dialect]


def record_vote(
    db: Session,
    room: Room,
    song_a_id: str,
    song_b_id: str,
    winner_id: str,
    voter_id: str,
) -> bool:
    """
    1 票を記録する。同じユーザー × 同じ（順序なし）ペアの票は 1 件だけで、
    再投票は既存行を上書きする（後勝ち）。

    曲がこの部屋のものでない / winner がペアに含まれない場合は False。
    """
    song_ids = {s.id for s in room.songs}
    if song_a_id not in song_ids or song_b_id not in song_ids:
        return False
    if song_a_id == song_b_id:
        return False
    if winner_id not in (song_a_id, song_b_id):
        return False

    low, high = pair_key(song_a_id, song_b_id)
    now = utcnow()

    insert = _insert_for(db)
    stmt = insert(Comparison).values(
        id=str(uuid.uuid4()),
        room_id=room.id,
        song_a_id=song_a_id,
        song_b_id=song_b_id,
        winner_id=winner_id,
        user_id=voter_id,
        pair_low=low,
        pair_high=high,
        created_at=now,
    )
    # 削除 → 挿入ではなく一意制約に対する UPSERT にする
    stmt = stmt.on_conflict_do_update(
        index_elements=["room_id", "user_id", "pair_low", "pair_high"],
        set_={
            "song_a_id": stmt.excluded.song_a_id,
            "song_b_id": stmt.excluded.song_b_id,
            "winner_id": stmt.excluded.winner_id,
            "created_at": stmt.excluded.created_at,
        },
    )
    db.execute(stmt)

    room.updated_at = now
    db.add(room)
    db.commit()

    logger.info(
        "vote recorded: room=%s voter=%s pair=(%s, %s) winner=%s",
        room.id, voter_id, song_a_id, song_b_id, winner_id,
    )
    return True


def tally(comparisons: Iterable[Comparison], song_id: str) -> WinRate:
    """song_id が登場する比較だけを数えて勝率（%）を出す"""
    wins = 0
    losses = 0
    for c in comparisons:
        if c.song_a_id != song_id and c.song_b_id != song_id:
            continue
        if c.winner_id == song_id:
            wins += 1
        else:
            losses += 1

    total = wins + losses
    rate = (wins / total) * 100 if total > 0 else 0.0
    return WinRate(win_rate=rate, wins=wins, losses=losses)


def win_rate(db: Session, room_id: str, song_id: str) -> WinRate:
    # キャッシュはせず毎回集計し直す
    comparisons = (
        db.query(Comparison)
        .filter(
            Comparison.room_id == room_id,
            or_(Comparison.song_a_id == song_id, Comparison.song_b_id == song_id),
        )
        .all()
    )
    return tally(comparisons, song_id)


def voted_pairs(db: Session, room_id: str, user_id: str) -> list[tuple[str, str]]:
    rows = (
        db.query(Comparison.song_a_id, Comparison.song_b_id)
        .filter(
            Comparison.room_id == room_id,
            Comparison.user_id == user_id,
        )
        .all()
    )
    return [(a, b) for a, b in rows]


def next_comparison_pair(
    db: Session, room: Room, user_id: str
) -> Optional[tuple[Song, Song]]:
    return next_pair(list(room.songs), voted_pairs(db, room.id, user_id))

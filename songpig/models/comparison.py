from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)

from songpig.db import Base, utcnow


class Comparison(Base):
    __tablename__ = "comparisons"

    id = Column(String, primary_key=True, index=True)

    # どの部屋の比較か
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False, index=True)

    # 提示された順の 2 曲
    song_a_id = Column(String, ForeignKey("songs.id"), nullable=False)
    song_b_id = Column(String, ForeignKey("songs.id"), nullable=False)

    # 勝った曲（song_a_id か song_b_id のどちらか）
    winner_id = Column(String, ForeignKey("songs.id"), nullable=False)

    # 投票したユーザー
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # 順序なしペアを正規化したもの（pair_low < pair_high）
    pair_low = Column(String, nullable=False)
    pair_high = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # 同じユーザーが同じペアに複数票を持てないようにする制約
    __table_args__ = (
        UniqueConstraint(
            "room_id", "user_id", "pair_low", "pair_high",
            name="uq_comparison_once_per_pair",
        ),
    )

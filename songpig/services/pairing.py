# songpig/services/pairing.py
from typing import Iterable, Optional, Sequence, TypeVar

from ..models.song import Song

S = TypeVar("S", bound=Song)


def pair_key(song_a_id: str, song_b_id: str) -> tuple[str, str]:
    """順序なしペアを (小さい方, 大きい方) に正規化する"""
    return (song_a_id, song_b_id) if song_a_id <= song_b_id else (song_b_id, song_a_id)


def next_pair(
    songs: Sequence[S],
    voted_pairs: Iterable[tuple[str, str]],
) -> Optional[tuple[S, S]]:
    """
    次に比較させる 2 曲を返す。

    - songs は作成順。(i, j), i < j の順に走査し、
      まだ投票していない最初のペアを返す（何度呼んでも同じ結果）。
    - すべて投票済みなら最初の 2 曲に戻る（None にはしない）。
    - 2 曲未満なら None（「曲が足りない」状態。エラーではない）。
    """
    if len(songs) < 2:
        return None

    seen = {pair_key(a, b) for a, b in voted_pairs}

    for i in range(len(songs)):
        for j in range(i + 1, len(songs)):
            if pair_key(songs[i].id, songs[j].id) not in seen:
                return songs[i], songs[j]

    # 全ペア投票済み → 先頭ペア
    return songs[0], songs[1]

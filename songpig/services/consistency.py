# songpig/services/consistency.py
"""
書き込み直後の読み取りを、見つかるまで線形バックオフでリトライするヘルパー。

レプリケーション遅延のある（read-after-write が保証されない）ストアでも
「作成 → すぐ遷移して取得」が成立するようにするためのもの。
回数・待ち時間は Config の READ_RETRY_* でまとめて設定する。
"""
import logging
import time
from typing import Callable, Optional, TypeVar

from ..config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base: float, max_delay: float) -> float:
    """attempt 回目（1 始まり）の待ち時間: base × attempt を max_delay で頭打ち"""
    return min(base * attempt, max_delay)


def read_with_retry(
    fetch: Callable[[], Optional[T]],
    *,
    label: str,
    attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[T]:
    """
    fetch() が None 以外を返すまで最大 attempts 回呼ぶ。
    全部 None なら None（呼び出し側では not found 扱い）。
    """
    attempts = settings.READ_RETRY_ATTEMPTS if attempts is None else attempts
    base_delay = settings.READ_RETRY_BASE_DELAY if base_delay is None else base_delay
    max_delay = settings.READ_RETRY_MAX_DELAY if max_delay is None else max_delay

    for attempt in range(1, max(attempts, 1) + 1):
        found = fetch()
        if found is not None:
            if attempt > 1:
                logger.info("%s: found after %s attempts", label, attempt)
            return found
        if attempt < attempts:
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.debug("%s: not visible yet (attempt %s), retrying in %.2fs", label, attempt, delay)
            if delay > 0:
                sleep(delay)

    logger.warning("%s: still missing after %s attempts", label, attempts)
    return None

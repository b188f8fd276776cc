"""
処理中メッセージ管理モジュール。

同じメッセージ(チャンネルID + タイムスタンプ)に対する処理パスが
同時に2つ以上走らないようにする。
- 処理開始時にキーを登録
- 既に登録済みのキーは拒否(キューイングしない)
- 処理終了時(成功・スキップ・失敗のいずれでも)にキーを解放
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """処理中メッセージのキー集合。

    Middlewareインスタンスごとに保持し、モジュールレベルでは共有しない。

    Attributes:
        _keys: 処理中のメッセージID
        _lock: 確認と登録を不可分にするためのロック
    """

    def __init__(self) -> None:
        self._keys: set[str] = set()
        self._lock = asyncio.Lock()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    async def acquire(self, key: str) -> bool:
        """キーを処理中として登録する。

        Args:
            key: メッセージID

        Returns:
            登録できた場合はTrue、既に処理中の場合はFalse
        """
        async with self._lock:
            if key in self._keys:
                logger.debug("Message already in flight: %s", key)
                return False
            self._keys.add(key)
            logger.debug("Message in flight: %s (total=%d)", key, len(self._keys))
            return True

    async def release(self, key: str) -> None:
        """キーを解放する。未登録のキーは無視する。"""
        async with self._lock:
            self._keys.discard(key)
            logger.debug("Message released: %s (total=%d)", key, len(self._keys))

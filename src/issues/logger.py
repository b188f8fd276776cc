"""
メッセージ単位のログ出力モジュール。

ログ行の先頭にメッセージID("<channel>:<ts>")を付与し、
同じメッセージに対する一連の処理をログ上で追跡できるようにする。
"""

import logging

logger = logging.getLogger("slack_github_issues")


class MessageLogger:
    """メッセージIDを前置するロガー。

    Attributes:
        _logger: 出力先のloggingロガー
    """

    def __init__(self, base_logger: logging.Logger | None = None) -> None:
        self._logger = base_logger or logger

    def info(self, message_id: str | None, *parts: object) -> None:
        self._logger.info("%s", self.format(message_id, *parts))

    def error(self, message_id: str | None, *parts: object) -> None:
        self._logger.error("%s", self.format(message_id, *parts))

    @staticmethod
    def format(message_id: str | None, *parts: object) -> str:
        """ログ行を組み立てる。

        Args:
            message_id: メッセージID。Noneの場合は前置しない
            *parts: 空白区切りで連結する要素

        Returns:
            "<message_id>: <parts...>" 形式の文字列
        """
        text = " ".join(str(part) for part in parts)
        if message_id is None:
            return text
        return f"{message_id}: {text}"

"""
例外定義モジュール。

ボット全体で使用する例外階層を定義する。
外部ライブラリの例外はクライアント層でここの例外に変換し、
Middlewareがメッセージを装飾してユーザーに返す。
"""


class IssueBotError(Exception):
    """ボットの基底例外。

    messageにはユーザーへの返信やログにそのまま使える文言を格納する。
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(IssueBotError):
    """設定ファイルの読み込み・検証に失敗した場合の例外。"""


class SlackRequestError(IssueBotError):
    """Slack API呼び出しに失敗した場合の例外。"""


class GitHubRequestError(IssueBotError):
    """GitHub API呼び出しに失敗した場合の例外。"""

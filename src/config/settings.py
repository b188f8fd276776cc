"""
環境変数設定モジュール。

Slack・GitHubの認証情報、ルール設定ファイルの場所、ログレベルを
環境変数(または.envファイル)から読み込む。
ルールそのものはissues_configモジュールがJSONファイルから読み込む。
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """起動時に必要な秘密情報と実行時オプション。

    トークンの形式が不正な場合はValidationErrorになり、ボットは起動しない。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Web API呼び出し用のボットトークン
    slack_bot_token: str = Field(..., pattern=r"^xoxb-.+$")
    # Socket Mode接続用のアプリレベルトークン
    slack_app_token: str = Field(..., pattern=r"^xapp-.+$")
    github_token: str = Field(..., min_length=1)
    slack_github_issues_config_path: str = "config/slack-github-issues.json"
    log_level: LogLevel = "INFO"

    @property
    def config_path(self) -> Path:
        """ルール設定ファイルのパス。"""
        return Path(self.slack_github_issues_config_path)


@lru_cache
def get_settings() -> Settings:
    """プロセス内で共有するSettingsを返す。"""
    return Settings()

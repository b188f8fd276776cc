"""
Issue起票ルール設定モジュール。

JSON形式の設定ファイルを読み込み、Pydanticモデルで検証する。
設定ファイルのキーはcamelCase(例: githubUser, successReaction)。
未知のプロパティは許可しない。

設定例:
    {
      "githubUser": "18F",
      "githubTimeout": 5000,
      "slackTimeout": 5000,
      "successReaction": "heavy_check_mark",
      "rules": [
        {"reactionName": "evergreen_tree", "githubRepository": "handbook"}
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from src.issues.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "slack-github-issues.json"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class RuleConfig(_CamelModel):
    """1件のルール設定。

    Attributes:
        reaction_name: ルールを発火させるリアクション名
        github_repository: Issueの起票先リポジトリ名
        channel_names: 対象チャンネル名。未指定の場合は全チャンネルが対象
    """

    reaction_name: str = Field(..., min_length=1)
    github_repository: str = Field(..., min_length=1)
    channel_names: list[str] | None = None


class IssuesConfig(_CamelModel):
    """ボット全体の設定。

    Attributes:
        github_user: Issueを起票するリポジトリのオーナー
        github_timeout: GitHub APIのタイムアウト(ミリ秒)
        slack_timeout: Slack APIのタイムアウト(ミリ秒)
        success_reaction: Issue起票済みを示すリアクション名
        rules: 評価順に並んだルール
        github_api_base_url: GitHub APIのベースURL(テスト・GHE用)
        slack_api_base_url: Slack APIのベースURL(テスト用)
    """

    github_user: str
    github_timeout: int = Field(..., gt=0)
    slack_timeout: int = Field(..., gt=0)
    success_reaction: str
    rules: list[RuleConfig]
    github_api_base_url: str | None = None
    slack_api_base_url: str | None = None


def _describe_error(error: dict[str, Any]) -> str:
    """ValidationErrorの1件を設定ファイルの用語で説明する。"""
    loc = error["loc"]
    error_type = error["type"]

    if len(loc) >= 3 and loc[0] == "rules" and isinstance(loc[1], int):
        prefix = f"rule {loc[1]} "
        field = ".".join(str(part) for part in loc[2:])
        if error_type == "missing":
            return f"{prefix}missing {field}"
        if error_type == "extra_forbidden":
            return f"{prefix}contains unknown property {field}"
        return f"{prefix}{field}: {error['msg']}"

    field = ".".join(str(part) for part in loc)
    if error_type == "missing":
        return f"missing {field}"
    if error_type == "extra_forbidden":
        return f"unknown property {field}"
    return f"{field}: {error['msg']}"


def validate_config(data: dict[str, Any]) -> IssuesConfig:
    """設定内容を検証する。

    検出したエラーはすべて1つのConfigErrorにまとめる。

    Args:
        data: JSONから読み込んだ設定

    Returns:
        検証済みの設定

    Raises:
        ConfigError: 必須項目の欠落、未知のプロパティ、型の不一致がある場合
    """
    try:
        return IssuesConfig.model_validate(data)
    except ValidationError as e:
        errors = [_describe_error(error) for error in e.errors()]
        raise ConfigError("Invalid configuration:\n  " + "\n  ".join(errors)) from e


def load_config(path: str | Path | None = None) -> IssuesConfig:
    """設定ファイルを読み込んで検証する。

    Args:
        path: 設定ファイルのパス。Noneの場合はDEFAULT_CONFIG_PATH

    Returns:
        検証済みの設定

    Raises:
        ConfigError: 読み込み・JSON解析・検証のいずれかに失敗した場合
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    error_prefix = f"failed to load configuration from {config_path}: "
    logger.info("reading configuration from %s", config_path)

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{error_prefix}invalid JSON: {e}") from e
    except OSError as e:
        raise ConfigError(f"{error_prefix}{e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{error_prefix}top-level value must be a JSON object")

    return validate_config(data)

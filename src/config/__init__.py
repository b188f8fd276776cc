"""
設定管理モジュール。

環境変数とIssue起票ルールの設定を型安全に管理し、
アプリケーション全体で使用する設定を提供する。
"""

from src.config.issues_config import (
    DEFAULT_CONFIG_PATH,
    IssuesConfig,
    RuleConfig,
    load_config,
    validate_config,
)
from src.config.settings import Settings, get_settings

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "IssuesConfig",
    "RuleConfig",
    "Settings",
    "get_settings",
    "load_config",
    "validate_config",
]

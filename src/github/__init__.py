"""
GitHubモジュール。

Issue作成を行うGitHub APIクライアントを提供する。
"""

from src.github.client import DEFAULT_API_BASE_URL, GitHubClient, GitHubClientImpl

__all__ = [
    "DEFAULT_API_BASE_URL",
    "GitHubClient",
    "GitHubClientImpl",
]

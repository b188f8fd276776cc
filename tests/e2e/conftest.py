"""
E2Eテスト用の共有フィクスチャと設定。

Slack Web APIはAsyncWebClientのモック、GitHub APIはhttpx.MockTransportで置き換え、
ハンドラからクライアントまでの実装を組み合わせて検証する。
"""

import json
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from src.config.issues_config import IssuesConfig, validate_config
from src.github.client import GitHubClientImpl
from src.issues.middleware import Middleware
from src.slack.client import SlackClientImpl

PERMALINK = "https://18f.slack.com/archives/handbook/p1360782804083113"
ISSUE_URL = "https://github.com/18F/handbook/issues/1"


class GitHubStub:
    """GitHub APIのスタブ。受信したリクエストを記録する。"""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.body: dict[str, Any] = {"html_url": ISSUE_URL}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=json.dumps(self.body))

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


# =============================================================================
# 設定フィクスチャ
# =============================================================================


@pytest.fixture
def e2e_config() -> IssuesConfig:
    """E2Eテスト用のルール設定を提供。"""
    return validate_config(
        {
            "githubUser": "18F",
            "githubTimeout": 5000,
            "slackTimeout": 5000,
            "successReaction": "heavy_check_mark",
            "rules": [
                {
                    "reactionName": "evergreen_tree",
                    "githubRepository": "hub",
                    "channelNames": ["hub"],
                },
                {"reactionName": "evergreen_tree", "githubRepository": "handbook"},
            ],
        }
    )


# =============================================================================
# Slackスタブフィクスチャ
# =============================================================================


@pytest.fixture
def web_client() -> MagicMock:
    """Slack Web APIの応答を返すAsyncWebClientのモックを提供。"""
    client = MagicMock()
    client.team_info = AsyncMock(return_value={"ok": True, "team": {"domain": "18f"}})
    client.conversations_list = AsyncMock(
        return_value={
            "ok": True,
            "channels": [
                {"id": "C5150OU812", "name": "handbook"},
                {"id": "C0HUB", "name": "hub"},
            ],
            "response_metadata": {"next_cursor": ""},
        }
    )
    client.reactions_get = AsyncMock(
        return_value={
            "ok": True,
            "type": "message",
            "channel": "C5150OU812",
            "message": {
                "type": "message",
                "ts": "1360782804.083113",
                "permalink": PERMALINK,
                "reactions": [
                    {"name": "evergreen_tree", "count": 1, "users": ["U5150OU812"]},
                ],
            },
        }
    )
    client.reactions_add = AsyncMock(return_value={"ok": True})
    return client


@pytest.fixture
def github_stub() -> GitHubStub:
    """GitHub APIのスタブを提供。"""
    return GitHubStub()


@pytest_asyncio.fixture
async def slack_client(e2e_config: IssuesConfig, web_client: MagicMock) -> SlackClientImpl:
    """ワークスペース情報を読み込み済みのSlackClientImplを提供。"""
    client = SlackClientImpl(web_client=web_client, success_reaction=e2e_config.success_reaction)
    await client.load_workspace()
    return client


@pytest_asyncio.fixture
async def middleware(
    e2e_config: IssuesConfig, slack_client: SlackClientImpl, github_stub: GitHubStub
) -> AsyncGenerator[Middleware, None]:
    """実装クライアントを組み合わせたMiddlewareを提供。"""
    github_client = GitHubClientImpl(
        user=e2e_config.github_user,
        token="ghp_test_token",
        timeout_ms=e2e_config.github_timeout,
        transport=httpx.MockTransport(github_stub),
    )
    yield Middleware(
        config=e2e_config,
        slack_client=slack_client,
        github_client=github_client,
    )
    await github_client.close()


@pytest.fixture
def say() -> AsyncMock:
    """boltのsay関数のモックを提供。"""
    return AsyncMock(return_value={"ok": True})

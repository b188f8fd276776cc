"""
Pytest設定と共有フィクスチャ。

プロジェクト全体で共有されるフィクスチャと設定を定義します。
Slack・GitHubクライアントはモックに置き換えます。
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

REACTION = "evergreen_tree"
SUCCESS_REACTION = "heavy_check_mark"
USER_ID = "U5150OU812"
CHANNEL_ID = "C5150OU812"
CHANNEL_NAME = "handbook"
TEAM_DOMAIN = "18f"
TIMESTAMP = "1360782804.083113"
PERMALINK = "https://18f.slack.com/archives/handbook/p1360782804083113"
ISSUE_URL = "https://github.com/18F/handbook/issues/1"
MESSAGE_ID = "C5150OU812:1360782804.083113"


@pytest.fixture
def config_data() -> dict[str, Any]:
    """テスト用のルール設定(JSONと同じcamelCase形式)を提供。

    チャンネル制限付きのルールを、同じリアクションの制限なしルールより先に置く。
    """
    return {
        "githubUser": "18F",
        "githubTimeout": 5000,
        "slackTimeout": 5000,
        "successReaction": SUCCESS_REACTION,
        "rules": [
            {
                "reactionName": REACTION,
                "githubRepository": "hub",
                "channelNames": ["hub"],
            },
            {
                "reactionName": "smiley",
                "githubRepository": "hub",
                "channelNames": ["general"],
            },
            {
                "reactionName": REACTION,
                "githubRepository": "handbook",
            },
        ],
    }


@pytest.fixture
def issues_config(config_data: dict[str, Any]):
    """検証済みのIssuesConfigを提供。"""
    from src.config.issues_config import validate_config

    return validate_config(config_data)


@pytest.fixture
def reaction_added_event() -> dict[str, Any]:
    """reaction_addedイベントのペイロードを提供。"""
    return {
        "type": "reaction_added",
        "user": USER_ID,
        "item": {
            "type": "message",
            "channel": CHANNEL_ID,
            "ts": TIMESTAMP,
        },
        "reaction": REACTION,
        "event_ts": TIMESTAMP,
    }


@pytest.fixture
def reaction_payload():
    """reactions.getの結果(成功リアクションなし)を提供。"""
    from src.issues.models import ReactionPayload

    return ReactionPayload(
        channel=CHANNEL_ID,
        timestamp=TIMESTAMP,
        permalink=PERMALINK,
        reactions=[],
    )


@pytest.fixture
def mock_slack_client(reaction_payload) -> MagicMock:
    """SlackClientプロトコルのモックを提供。"""
    client = MagicMock()
    client.success_reaction = SUCCESS_REACTION
    client.get_channel_name = MagicMock(return_value=CHANNEL_NAME)
    client.get_team_domain = MagicMock(return_value=TEAM_DOMAIN)
    client.get_reactions = AsyncMock(return_value=reaction_payload)
    client.add_success_reaction = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_github_client() -> MagicMock:
    """GitHubClientプロトコルのモックを提供。"""
    client = MagicMock()
    client.user = "18F"
    client.file_new_issue = AsyncMock(return_value=ISSUE_URL)
    return client


@pytest.fixture
def mock_message_logger() -> MagicMock:
    """MessageLoggerのモックを提供。"""
    from src.issues.logger import MessageLogger

    return MagicMock(spec=MessageLogger)


@pytest.fixture
def mock_reply() -> AsyncMock:
    """返信関数のモックを提供。"""
    return AsyncMock(return_value=None)

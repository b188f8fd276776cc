"""
Slackモジュール。

Slack Botの実装、イベントハンドラ、Slack APIクライアントを提供する。
"""

from src.slack.app import SlackBot, SlackBotImpl
from src.slack.client import SlackClient, SlackClientImpl
from src.slack.handlers import (
    create_reply,
    handle_channel_created,
    handle_channel_rename,
    handle_reaction_added,
)

__all__ = [
    "SlackBot",
    "SlackBotImpl",
    "SlackClient",
    "SlackClientImpl",
    "create_reply",
    "handle_channel_created",
    "handle_channel_rename",
    "handle_reaction_added",
]

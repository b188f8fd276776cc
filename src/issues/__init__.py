"""
Issue起票モジュール。

リアクションイベントのルール照合、重複処理の防止、
Slack -> GitHub -> Slack の呼び出し順序制御を担当する。
"""

from src.issues.errors import (
    ConfigError,
    GitHubRequestError,
    IssueBotError,
    SlackRequestError,
)
from src.issues.inflight import InFlightRegistry
from src.issues.logger import MessageLogger
from src.issues.middleware import Middleware, ProcessingContext, ReplyFunction, parse_event
from src.issues.models import (
    IssueMetadata,
    Outcome,
    OutcomeKind,
    Reaction,
    ReactionEvent,
    ReactionItem,
    ReactionPayload,
)
from src.issues.rules import ChannelNameResolver, Rule, RuleSet

__all__ = [
    "ChannelNameResolver",
    "ConfigError",
    "GitHubRequestError",
    "InFlightRegistry",
    "IssueBotError",
    "IssueMetadata",
    "MessageLogger",
    "Middleware",
    "Outcome",
    "OutcomeKind",
    "ProcessingContext",
    "Reaction",
    "ReactionEvent",
    "ReactionItem",
    "ReactionPayload",
    "ReplyFunction",
    "Rule",
    "RuleSet",
    "SlackRequestError",
    "parse_event",
]

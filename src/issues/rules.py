"""
ルールマッチングモジュール。

リアクション名と(任意の)チャンネル名の組み合わせから
Issueの起票先リポジトリを決めるルールを定義する。
ルールは設定ファイルの記載順に評価し、最初に一致したものを採用する。
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict

from src.issues.models import ReactionEvent

if TYPE_CHECKING:
    from src.config.issues_config import RuleConfig


class ChannelNameResolver(Protocol):
    """チャンネルIDからチャンネル名を解決するプロトコル型。"""

    def get_channel_name(self, channel_id: str) -> str: ...


class Rule(BaseModel):
    """リアクションからIssue起票先を決めるルール。

    Attributes:
        reaction_name: ルールを発火させるリアクション名
        github_repository: Issueの起票先リポジトリ名
        channel_names: 対象チャンネル名の集合。Noneの場合は全チャンネルが対象
    """

    model_config = ConfigDict(frozen=True)

    reaction_name: str
    github_repository: str
    channel_names: frozenset[str] | None = None

    @classmethod
    def from_config(cls, rule_config: "RuleConfig") -> "Rule":
        channel_names = rule_config.channel_names
        return cls(
            reaction_name=rule_config.reaction_name,
            github_repository=rule_config.github_repository,
            channel_names=frozenset(channel_names) if channel_names is not None else None,
        )

    def match(self, event: ReactionEvent, resolver: ChannelNameResolver) -> bool:
        """イベントがこのルールに一致するかどうかを返す。

        リアクション名が一致しない場合はチャンネル名を解決しない。
        """
        return self.reaction_matches(event) and self.channel_matches(event, resolver)

    def reaction_matches(self, event: ReactionEvent) -> bool:
        return event.reaction == self.reaction_name

    def channel_matches(self, event: ReactionEvent, resolver: ChannelNameResolver) -> bool:
        if self.channel_names is None:
            return True
        return resolver.get_channel_name(event.item.channel) in self.channel_names

    def __str__(self) -> str:
        fields = (
            f"reaction_name={self.reaction_name!r}, "
            f"github_repository={self.github_repository!r}"
        )
        if self.channel_names is not None:
            fields += f", channel_names={sorted(self.channel_names)!r}"
        return f"Rule({fields})"


class RuleSet:
    """順序付きのルール集合。

    Attributes:
        _rules: 評価順に並んだルール
    """

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def find(self, event: ReactionEvent, resolver: ChannelNameResolver) -> Rule | None:
        """最初に一致したルールを返す。一致しない場合はNoneを返す。"""
        for rule in self._rules:
            if rule.match(event, resolver):
                return rule
        return None

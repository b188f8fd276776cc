"""
リアクションからGitHub Issueを起票するMiddlewareモジュール。

1件のreaction_addedイベントに対して以下を順に実行する:
1. ルールとの照合(一致しなければ何もしない)
2. 同一メッセージの処理中チェック(処理中なら何もしない)
3. reactions.get でリアクション取得(成功リアクションがあれば起票済みとしてスキップ)
4. GitHub Issue作成
5. 成功リアクションの付与
6. 結果のログ出力とユーザーへの返信

各ステップの失敗はステップ固有の文言で装飾して返信する。
想定外の例外はexecuteで捕捉し、executeから例外を送出しない。
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, ValidationError

from src.issues.errors import IssueBotError
from src.issues.inflight import InFlightRegistry
from src.issues.logger import MessageLogger
from src.issues.models import (
    IssueMetadata,
    Outcome,
    OutcomeKind,
    ReactionEvent,
    ReactionPayload,
)
from src.issues.rules import Rule, RuleSet

if TYPE_CHECKING:
    from src.config.issues_config import IssuesConfig
    from src.github.client import GitHubClient
    from src.slack.client import SlackClient

logger = logging.getLogger(__name__)

ReplyFunction = Callable[[str], Awaitable[None]]


class ProcessingContext(BaseModel):
    """1回の処理パスで各ステップが共有する情報。

    Attributes:
        event: 受信したイベント
        rule: 一致したルール
        message_id: メッセージID("<channel>:<ts>")
        permalink: ワークスペースドメインとチャンネル名から組み立てたパーマリンク
    """

    model_config = ConfigDict(frozen=True)

    event: ReactionEvent
    rule: Rule
    message_id: str
    permalink: str

    @property
    def channel(self) -> str:
        return self.event.item.channel

    @property
    def timestamp(self) -> str:
        return self.event.item.ts


def parse_event(raw_event: dict[str, Any] | None) -> ReactionEvent | None:
    """受信ペイロードをReactionEventに変換する。

    形式が不正な場合はエラーにせずNoneを返す。
    """
    if not raw_event:
        return None
    try:
        return ReactionEvent.model_validate(raw_event)
    except ValidationError:
        return None


def _error_text(error: Exception) -> str:
    if isinstance(error, IssueBotError):
        return error.message
    if isinstance(error, KeyError) and error.args:
        return str(error.args[0])
    return str(error) or type(error).__name__


class Middleware:
    """リアクションからIssueを起票する処理の本体。

    依存性注入パターン:
    - SlackClient: リアクション取得・付与、チャンネル名解決
    - GitHubClient: Issue作成
    - MessageLogger: メッセージID付きログ出力

    Attributes:
        _rules: 評価順のルール集合
        _success_reaction: Issue起票済みを示すリアクション名
        _slack: Slackクライアント
        _github: GitHubクライアント
        _logger: メッセージID付きロガー
        _in_flight: 処理中メッセージのキー集合
    """

    def __init__(
        self,
        config: "IssuesConfig",
        slack_client: "SlackClient",
        github_client: "GitHubClient",
        message_logger: MessageLogger | None = None,
    ) -> None:
        """Middlewareを初期化する。

        Args:
            config: 検証済みの設定
            slack_client: Slackクライアント
            github_client: GitHubクライアント
            message_logger: ログ出力先(省略時は既定のロガー)
        """
        self._rules = RuleSet(Rule.from_config(rule) for rule in config.rules)
        self._success_reaction = config.success_reaction
        self._slack = slack_client
        self._github = github_client
        self._logger = message_logger or MessageLogger()
        self._in_flight = InFlightRegistry()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def in_flight(self) -> InFlightRegistry:
        return self._in_flight

    async def execute(self, raw_event: dict[str, Any] | None, reply: ReplyFunction) -> Outcome:
        """1件のイベントを処理する。

        この関数は例外を送出しない。想定外のエラーはログと返信で報告し、
        FAILEDの結果として返す。

        Args:
            raw_event: Slackから受信したイベントのペイロード
            reply: イベント発生チャンネルへ返信する関数

        Returns:
            処理結果
        """
        try:
            event = parse_event(raw_event)
            rule = self.find_matching_rule(event)
            if event is None or rule is None:
                return Outcome.ignored()

            outcome = await self.process(event, rule)
            if outcome.kind is not OutcomeKind.IN_PROGRESS:
                await self._finish(event.message_id, outcome, reply)
            return outcome
        except Exception as e:
            return await self._handle_unexpected_error(e, raw_event, reply)

    def find_matching_rule(self, event: ReactionEvent | None) -> Rule | None:
        """イベントに一致する最初のルールを返す。

        メッセージへのreaction_addedイベント以外は照合せずNoneを返す。
        """
        if event is None or not event.is_message_reaction():
            return None
        return self._rules.find(event, self._slack)

    async def process(self, event: ReactionEvent, rule: Rule) -> Outcome:
        """ルールに一致したイベントを処理する。

        同じメッセージの処理中は何もせずIN_PROGRESSを返す。
        処理中キーは結果にかかわらず解放する。
        """
        message_id = event.message_id
        self._logger.info(message_id, "matches rule:", rule)

        if not await self._in_flight.acquire(message_id):
            self._logger.info(message_id, "already in progress")
            return Outcome.in_progress()

        try:
            context = ProcessingContext(
                event=event,
                rule=rule,
                message_id=message_id,
                permalink=self.build_permalink(event),
            )
            return await self._run_pipeline(context)
        finally:
            await self._in_flight.release(message_id)

    def build_permalink(self, event: ReactionEvent) -> str:
        """ワークスペースドメインとチャンネル名からメッセージのURLを組み立てる。"""
        domain = self._slack.get_team_domain()
        channel_name = self._slack.get_channel_name(event.item.channel)
        timestamp = event.item.ts.replace(".", "")
        return f"https://{domain}.slack.com/archives/{channel_name}/p{timestamp}"

    def parse_metadata(self, payload: ReactionPayload, channel_id: str) -> IssueMetadata:
        """reactions.getの結果からIssue作成用のメタデータを生成する。"""
        channel_name = self._slack.get_channel_name(channel_id)
        return IssueMetadata.from_payload(payload, channel_name)

    async def _run_pipeline(self, context: ProcessingContext) -> Outcome:
        message_id = context.message_id

        self._logger.info(message_id, "getting reactions for", context.permalink)
        try:
            payload = await self._slack.get_reactions(context.channel, context.timestamp)
        except Exception as e:
            return Outcome.failed(
                f"failed to get reactions for {context.permalink}: {_error_text(e)}"
            )

        permalink = payload.permalink or context.permalink
        if payload.has_reaction(self._success_reaction):
            return Outcome.already_processed(permalink)

        metadata = self.parse_metadata(payload, context.channel)
        repository = context.rule.github_repository

        self._logger.info(message_id, "making GitHub request for", permalink)
        try:
            issue_url = await self._github.file_new_issue(metadata, repository)
        except Exception as e:
            return Outcome.failed(
                f"failed to create a GitHub issue in {self._github.user}/{repository}: "
                f"{_error_text(e)}"
            )

        self._logger.info(message_id, "adding", self._success_reaction)
        try:
            await self._slack.add_success_reaction(context.channel, context.timestamp)
        except Exception as e:
            return Outcome.failed(
                f"created {issue_url} but failed to add {self._success_reaction}: "
                f"{_error_text(e)}",
                issue_url=issue_url,
            )

        return Outcome.created(issue_url, permalink=permalink)

    async def _finish(self, message_id: str, outcome: Outcome, reply: ReplyFunction) -> None:
        """結果をログに出力し、必要であればユーザーに返信する。

        返信の失敗はログに残すだけで、結果は変えない。
        """
        if outcome.kind is OutcomeKind.FAILED:
            self._logger.error(message_id, outcome.message)
        else:
            self._logger.info(message_id, outcome.message)

        if not outcome.should_reply:
            return
        try:
            await reply(outcome.message)
        except Exception:
            logger.exception("Failed to reply with outcome: %s", message_id)

    async def _handle_unexpected_error(
        self, error: Exception, raw_event: dict[str, Any] | None, reply: ReplyFunction
    ) -> Outcome:
        dump = json.dumps(raw_event, indent=2, default=str)
        message = f"unhandled error: {_error_text(error)}\nmessage: {dump}"
        self._logger.error(None, message)
        logger.debug("Unhandled error details", exc_info=error)

        try:
            await reply(message)
        except Exception:
            logger.exception("Failed to reply with unhandled error message")

        return Outcome.failed(message)

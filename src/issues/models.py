"""
Issue起票パイプラインの型定義モジュール。

Pydanticモデルとして以下を定義する:
- ReactionEvent: Slackのreaction_addedイベント
- ReactionPayload: reactions.getの結果(パーマリンクと現在のリアクション)
- IssueMetadata: GitHub Issue作成に使用するメタデータ
- OutcomeKind / Outcome: 1回の処理パスの結果
"""

from datetime import UTC, datetime
from email.utils import format_datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

REACTION_ADDED = "reaction_added"
MESSAGE_ITEM_TYPE = "message"


class ReactionItem(BaseModel):
    """リアクション対象のアイテム。

    Attributes:
        type: アイテムの種類("message", "file" など)
        channel: チャンネルID
        ts: メッセージのタイムスタンプ
    """

    model_config = ConfigDict(frozen=True)

    type: str
    channel: str = Field(..., min_length=1)
    ts: str = Field(..., min_length=1)


class ReactionEvent(BaseModel):
    """Slackから受信したreaction_addedイベント。

    1回の処理パスの間だけ存在する不変オブジェクト。

    Attributes:
        type: イベント種別
        user: リアクションを付けたユーザーID
        item: リアクション対象のアイテム
        reaction: リアクション名(絵文字名、コロンなし)
        event_ts: イベントのタイムスタンプ
    """

    model_config = ConfigDict(frozen=True)

    type: str
    user: str = ""
    item: ReactionItem
    reaction: str = ""
    event_ts: str = ""

    @property
    def message_id(self) -> str:
        """メッセージを一意に識別するキー("<channel>:<ts>")を返す。"""
        return f"{self.item.channel}:{self.item.ts}"

    def is_message_reaction(self) -> bool:
        """メッセージへのreaction_addedイベントかどうかを返す。"""
        return self.type == REACTION_ADDED and self.item.type == MESSAGE_ITEM_TYPE


class Reaction(BaseModel):
    """メッセージに付いている1種類のリアクション。"""

    name: str
    count: int = 0
    users: list[str] = Field(default_factory=list)


class ReactionPayload(BaseModel):
    """reactions.getで取得したメッセージ情報。

    Attributes:
        channel: チャンネルID
        timestamp: メッセージのタイムスタンプ
        permalink: メッセージのパーマリンク
        reactions: 現在付いているリアクションの一覧
    """

    channel: str
    timestamp: str
    permalink: str
    reactions: list[Reaction] = Field(default_factory=list)

    def has_reaction(self, name: str) -> bool:
        """指定した名前のリアクションが付いているかどうかを返す。"""
        return any(reaction.name == name for reaction in self.reactions)


class IssueMetadata(BaseModel):
    """GitHub Issue作成用のメタデータ。

    メッセージ本文や投稿者はIssueに含めない。
    公開リポジトリにユーザーの発言が漏れないよう、本文はパーマリンクのみとする。

    Attributes:
        channel: チャンネル名
        timestamp: メッセージのタイムスタンプ
        url: メッセージのパーマリンク(Issue本文になる)
        date: メッセージの投稿日時(UTC)
        title: Issueのタイトル
    """

    channel: str
    timestamp: str
    url: str
    date: datetime
    title: str

    @classmethod
    def from_payload(cls, payload: ReactionPayload, channel_name: str) -> "IssueMetadata":
        """reactions.getの結果とチャンネル名からメタデータを生成する。

        Args:
            payload: reactions.getの結果
            channel_name: チャンネル名

        Returns:
            生成したメタデータ
        """
        date = datetime.fromtimestamp(float(payload.timestamp), tz=UTC)
        return cls(
            channel=channel_name,
            timestamp=payload.timestamp,
            url=payload.permalink,
            date=date,
            title=f"Update from #{channel_name} at {format_datetime(date, usegmt=True)}",
        )


class OutcomeKind(Enum):
    """処理パスの結果の種類。

    - CREATED: Issueを作成し成功リアクションを付けた
    - ALREADY_PROCESSED: 成功リアクションが既に付いていたため何もしなかった
    - FAILED: 外部呼び出しの失敗、または想定外のエラー
    - IN_PROGRESS: 同じメッセージを処理中のため何もしなかった
    - IGNORED: どのルールにも一致しなかった
    """

    CREATED = "created"
    ALREADY_PROCESSED = "already_processed"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"
    IGNORED = "ignored"


class Outcome(BaseModel):
    """1回の処理パスの結果。

    Attributes:
        kind: 結果の種類
        message: ログとユーザーへの返信に使う文言
        issue_url: 作成したIssueのURL(作成済みの場合)
        permalink: 対象メッセージのパーマリンク(取得済みの場合)
    """

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    message: str = ""
    issue_url: str | None = None
    permalink: str | None = None

    @property
    def should_reply(self) -> bool:
        """ユーザーへ返信すべき結果かどうかを返す。"""
        return self.kind in (OutcomeKind.CREATED, OutcomeKind.FAILED)

    @classmethod
    def ignored(cls) -> "Outcome":
        return cls(kind=OutcomeKind.IGNORED)

    @classmethod
    def in_progress(cls) -> "Outcome":
        return cls(kind=OutcomeKind.IN_PROGRESS, message="already in progress")

    @classmethod
    def already_processed(cls, permalink: str) -> "Outcome":
        return cls(
            kind=OutcomeKind.ALREADY_PROCESSED,
            message=f"already processed {permalink}",
            permalink=permalink,
        )

    @classmethod
    def created(cls, issue_url: str, permalink: str | None = None) -> "Outcome":
        return cls(
            kind=OutcomeKind.CREATED,
            message=f"created: {issue_url}",
            issue_url=issue_url,
            permalink=permalink,
        )

    @classmethod
    def failed(cls, message: str, issue_url: str | None = None) -> "Outcome":
        return cls(kind=OutcomeKind.FAILED, message=message, issue_url=issue_url)

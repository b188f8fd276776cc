"""
Slack APIクライアントモジュール。

Middlewareが使用するSlack操作をAsyncWebClientの上に実装する:
- reactions.get によるメッセージ情報・リアクションの取得
- reactions.add による成功リアクションの付与
- チャンネル名・ワークスペースドメインの解決(起動時にキャッシュ)

slack_sdkの例外はSlackRequestErrorに変換する。
"""

import asyncio
import logging
from typing import Any, Protocol

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from src.issues.errors import SlackRequestError
from src.issues.models import Reaction, ReactionPayload

logger = logging.getLogger(__name__)

CONVERSATIONS_PAGE_LIMIT = 200


class SlackClient(Protocol):
    """Middlewareが依存するSlack操作のプロトコル型。"""

    @property
    def success_reaction(self) -> str: ...

    def get_channel_name(self, channel_id: str) -> str:
        """チャンネルIDからチャンネル名を返す。"""
        ...

    def get_team_domain(self) -> str:
        """ワークスペースのドメイン("<domain>.slack.com"の<domain>)を返す。"""
        ...

    async def get_reactions(self, channel: str, timestamp: str) -> ReactionPayload:
        """メッセージのパーマリンクと現在のリアクションを取得する。"""
        ...

    async def add_success_reaction(self, channel: str, timestamp: str) -> None:
        """メッセージに成功リアクションを付ける。"""
        ...


class SlackClientImpl:
    """SlackClientプロトコルの実装。

    Attributes:
        _web_client: Slack Web APIクライアント
        _success_reaction: Issue起票済みを示すリアクション名
        _channel_names: チャンネルID -> チャンネル名のキャッシュ
        _team_domain: ワークスペースのドメイン
    """

    def __init__(self, web_client: AsyncWebClient, success_reaction: str) -> None:
        """SlackClientImplを初期化する。

        タイムアウトとベースURLはAsyncWebClient側で設定する。

        Args:
            web_client: Slack Web APIクライアント
            success_reaction: Issue起票済みを示すリアクション名
        """
        self._web_client = web_client
        self._success_reaction = success_reaction
        self._channel_names: dict[str, str] = {}
        self._team_domain: str | None = None

    @property
    def success_reaction(self) -> str:
        return self._success_reaction

    async def load_workspace(self) -> None:
        """ワークスペースのドメインとチャンネル一覧を取得してキャッシュする。

        get_channel_name / get_team_domain を同期的に呼べるよう、起動時に一度実行する。

        Raises:
            SlackRequestError: API呼び出しに失敗した場合
        """
        team = await self._call("team.info", self._web_client.team_info)
        self._team_domain = team["team"]["domain"]

        cursor: str | None = None
        while True:
            response = await self._call(
                "conversations.list",
                self._web_client.conversations_list,
                types="public_channel,private_channel",
                exclude_archived=True,
                limit=CONVERSATIONS_PAGE_LIMIT,
                cursor=cursor,
            )
            for channel in response.get("channels", []):
                self._channel_names[channel["id"]] = channel["name"]
            cursor = response.get("response_metadata", {}).get("next_cursor") or None
            if cursor is None:
                break

        logger.info(
            "Loaded Slack workspace: domain=%s, channels=%d",
            self._team_domain,
            len(self._channel_names),
        )

    def remember_channel(self, channel_id: str, name: str) -> None:
        """チャンネル名のキャッシュを更新する(作成・名前変更イベント用)。"""
        self._channel_names[channel_id] = name
        logger.debug("Cached channel name: %s -> %s", channel_id, name)

    def get_channel_name(self, channel_id: str) -> str:
        """チャンネルIDからチャンネル名を返す。

        Raises:
            KeyError: キャッシュにないチャンネルの場合
        """
        try:
            return self._channel_names[channel_id]
        except KeyError:
            raise KeyError(f"unknown channel: {channel_id}") from None

    def get_team_domain(self) -> str:
        if self._team_domain is None:
            msg = "team domain is not loaded; call load_workspace() first"
            raise RuntimeError(msg)
        return self._team_domain

    async def get_reactions(self, channel: str, timestamp: str) -> ReactionPayload:
        """reactions.get を呼び出してメッセージ情報を取得する。

        Args:
            channel: チャンネルID
            timestamp: メッセージのタイムスタンプ

        Returns:
            パーマリンクとリアクション一覧

        Raises:
            SlackRequestError: API呼び出しに失敗した場合
        """
        response = await self._call(
            "reactions.get",
            self._web_client.reactions_get,
            channel=channel,
            timestamp=timestamp,
            full=True,
        )
        message = response.get("message", {})
        return ReactionPayload(
            channel=response.get("channel", channel),
            timestamp=message.get("ts", timestamp),
            permalink=message.get("permalink", ""),
            reactions=[Reaction.model_validate(r) for r in message.get("reactions", [])],
        )

    async def add_success_reaction(self, channel: str, timestamp: str) -> None:
        """reactions.add を呼び出して成功リアクションを付ける。

        Raises:
            SlackRequestError: API呼び出しに失敗した場合
        """
        await self._call(
            "reactions.add",
            self._web_client.reactions_add,
            channel=channel,
            timestamp=timestamp,
            name=self._success_reaction,
        )

    async def _call(self, method: str, api: Any, **kwargs: Any) -> Any:
        """Web APIを呼び出し、失敗をSlackRequestErrorに変換する。"""
        try:
            return await api(**kwargs)
        except SlackApiError as e:
            error = e.response.get("error", str(e)) if e.response is not None else str(e)
            raise SlackRequestError(f"Slack API method {method} failed: {error}") from e
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = str(e) or type(e).__name__
            raise SlackRequestError(
                f"failed to make Slack API request for method {method}: {reason}"
            ) from e

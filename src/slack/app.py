"""
Slackへの接続モジュール。

AsyncAppにイベントリスナーを登録し、Socket Modeでイベントを受信する。
リスナーは受信したイベントをhandlersモジュールの関数に渡すだけで、
Issue起票の処理はMiddlewareが行う。
"""

import logging
from typing import TYPE_CHECKING, Any, Protocol

from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler as SocketModeHandler
from slack_bolt.async_app import AsyncApp

from src.slack.handlers import (
    ChannelCache,
    SayFunction,
    handle_channel_created,
    handle_channel_rename,
    handle_reaction_added,
)

if TYPE_CHECKING:
    from src.issues.middleware import Middleware

logger = logging.getLogger(__name__)


class SlackBot(Protocol):
    """Slackとの接続を管理するボットのインターフェース。"""

    def register_handlers(self, middleware: "Middleware", channels: ChannelCache) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class SlackBotImpl:
    """slack-boltのAsyncAppを使ったSlackBot。

    Socket Modeで接続するため、イベント受信用の公開URLは不要。

    Attributes:
        _app: イベントリスナーを登録するAsyncApp
        _app_token: Socket Mode接続用のアプリレベルトークン
        _handler: 接続中のSocket Modeハンドラ(start前はNone)
    """

    def __init__(self, app: AsyncApp, app_token: str | None = None) -> None:
        self._app = app
        self._app_token = app_token
        self._handler: SocketModeHandler | None = None

    def register_handlers(self, middleware: "Middleware", channels: ChannelCache) -> None:
        """reaction_added・channel_created・channel_renameのリスナーを登録する。

        boltはリスナー関数の引数名で値を注入するため、引数名は変更しないこと。

        Args:
            middleware: Issue起票処理の本体
            channels: チャンネル名キャッシュ
        """

        async def on_reaction_added(event: dict[str, Any], say: SayFunction) -> None:
            await handle_reaction_added(event, say, middleware)

        async def on_channel_created(event: dict[str, Any]) -> None:
            await handle_channel_created(event, channels)

        async def on_channel_rename(event: dict[str, Any]) -> None:
            await handle_channel_rename(event, channels)

        self._app.event("reaction_added")(on_reaction_added)
        self._app.event("channel_created")(on_channel_created)
        self._app.event("channel_rename")(on_channel_rename)
        logger.info("registered reaction_added handler")

    async def start(self) -> None:
        """Socket Modeで接続し、イベントの受信を開始する。

        Raises:
            ValueError: app_tokenがない場合
        """
        if not self._app_token:
            msg = "app_token is required to connect over Socket Mode"
            raise ValueError(msg)

        self._handler = SocketModeHandler(app=self._app, app_token=self._app_token)
        logger.info("connecting to Slack over Socket Mode")
        await self._handler.start_async()

    async def stop(self) -> None:
        """Socket Mode接続を閉じる。未接続の場合は何もしない。"""
        if self._handler is None:
            return
        await self._handler.close_async()
        self._handler = None
        logger.info("disconnected from Slack")

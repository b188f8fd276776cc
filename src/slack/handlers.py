"""
Slackイベントハンドラモジュール。

reaction_addedイベントをMiddlewareに渡し、
チャンネル作成・名前変更イベントでチャンネル名キャッシュを更新する。
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from src.issues.middleware import Middleware, ReplyFunction
    from src.issues.models import Outcome

logger = logging.getLogger(__name__)

# 型エイリアス
SayFunction = Callable[..., Awaitable[dict[str, Any]]]


class ChannelCache(Protocol):
    """チャンネル名キャッシュのProtocol型。"""

    def remember_channel(self, channel_id: str, name: str) -> None: ...


def create_reply(event: dict[str, Any], say: SayFunction) -> "ReplyFunction":
    """イベント発生チャンネルにユーザー宛てで返信する関数を生成する。

    Args:
        event: reaction_addedイベント
        say: メッセージ送信用の関数

    Returns:
        返信テキストを受け取る非同期関数
    """
    user_id = event.get("user", "")
    channel_id = (event.get("item") or {}).get("channel")

    async def reply(text: str) -> None:
        message = f"<@{user_id}> {text}" if user_id else text
        if channel_id:
            await say(text=message, channel=channel_id)
        else:
            await say(text=message)

    return reply


async def handle_reaction_added(
    event: dict[str, Any],
    say: SayFunction,
    middleware: "Middleware",
) -> "Outcome":
    """reaction_addedイベントを処理する。

    Middleware.executeは例外を送出しないため、ここでの例外処理は不要。

    Args:
        event: Slackから受信したイベントデータ
        say: メッセージ送信用の関数
        middleware: Issue起票処理の本体

    Returns:
        処理結果
    """
    logger.debug(
        "Received reaction_added event",
        extra={"user_id": event.get("user"), "reaction": event.get("reaction")},
    )
    return await middleware.execute(event, create_reply(event, say))


async def handle_channel_created(event: dict[str, Any], channels: ChannelCache) -> None:
    """channel_createdイベントでチャンネル名キャッシュを更新する。"""
    channel = event.get("channel") or {}
    if "id" in channel and "name" in channel:
        channels.remember_channel(channel["id"], channel["name"])


async def handle_channel_rename(event: dict[str, Any], channels: ChannelCache) -> None:
    """channel_renameイベントでチャンネル名キャッシュを更新する。"""
    channel = event.get("channel") or {}
    if "id" in channel and "name" in channel:
        logger.info("Channel renamed: %s -> %s", channel["id"], channel["name"])
        channels.remember_channel(channel["id"], channel["name"])

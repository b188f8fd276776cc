"""
アプリケーションのエントリーポイント。

Slack BotをSocket Modeで起動する。
環境変数とルール設定の読み込み、クライアントの作成、
Middlewareの組み立て、ハンドラの登録、Socket Mode接続を行う。
"""

import asyncio
import logging

from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from src.config import IssuesConfig, Settings, get_settings, load_config
from src.github import GitHubClientImpl
from src.issues import MessageLogger, Middleware
from src.slack import SlackBotImpl, SlackClientImpl

logger = logging.getLogger(__name__)

SLACK_API_BASE_URL = "https://slack.com/api/"


def build_slack_client(settings: Settings, config: IssuesConfig) -> SlackClientImpl:
    """設定からSlackクライアントを作成する。"""
    web_client = AsyncWebClient(
        token=settings.slack_bot_token,
        base_url=config.slack_api_base_url or SLACK_API_BASE_URL,
        timeout=config.slack_timeout / 1000,
    )
    return SlackClientImpl(web_client=web_client, success_reaction=config.success_reaction)


def build_github_client(settings: Settings, config: IssuesConfig) -> GitHubClientImpl:
    """設定からGitHubクライアントを作成する。"""
    return GitHubClientImpl(
        user=config.github_user,
        token=settings.github_token,
        timeout_ms=config.github_timeout,
        base_url=config.github_api_base_url,
    )


async def main() -> None:
    """アプリケーションのエントリーポイント。

    以下の処理を順次実行する:
    1. 環境変数から設定を読み込み
    2. ルール設定ファイルを読み込み
    3. Slack・GitHubクライアントを作成し、ワークスペース情報をキャッシュ
    4. Middlewareを作成してハンドラを登録
    5. Socket Modeで起動
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    config = load_config(settings.config_path)

    slack_client = build_slack_client(settings, config)
    github_client = build_github_client(settings, config)
    await slack_client.load_workspace()

    middleware = Middleware(
        config=config,
        slack_client=slack_client,
        github_client=github_client,
        message_logger=MessageLogger(),
    )
    logger.info("Loaded %d rules", len(middleware.rules))

    app = AsyncApp(token=settings.slack_bot_token)
    bot = SlackBotImpl(app=app, app_token=settings.slack_app_token)
    bot.register_handlers(middleware, slack_client)

    try:
        logger.info("Starting Slack Bot...")
        await bot.start()
    finally:
        await bot.stop()
        await github_client.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

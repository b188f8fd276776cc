"""
GitHub APIクライアントモジュール。

Issue作成(POST /repos/{owner}/{repo}/issues)のみを扱う。
httpxの非同期クライアントを使用し、タイムアウトはクライアント側で設定する。
httpxの例外と非2xxレスポンスはGitHubRequestErrorに変換する。
"""

import logging
from typing import Protocol

import httpx

from src.issues.errors import GitHubRequestError
from src.issues.models import IssueMetadata

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com"
USER_AGENT = "slack-github-issues/0.1.0"


class GitHubClient(Protocol):
    """Middlewareが依存するGitHub操作のプロトコル型。"""

    @property
    def user(self) -> str:
        """Issueを起票するリポジトリのオーナーを返す。"""
        ...

    async def file_new_issue(self, metadata: IssueMetadata, repository: str) -> str:
        """Issueを作成し、そのURLを返す。"""
        ...


class GitHubClientImpl:
    """GitHubClientプロトコルの実装。

    Attributes:
        _user: リポジトリのオーナー
        _http: GitHub APIへのHTTPクライアント
    """

    def __init__(
        self,
        user: str,
        token: str,
        timeout_ms: int,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """GitHubClientImplを初期化する。

        Args:
            user: リポジトリのオーナー
            token: GitHubのアクセストークン
            timeout_ms: リクエストのタイムアウト(ミリ秒)
            base_url: APIのベースURL。Noneの場合はapi.github.com
            transport: HTTPトランスポート(テスト用)
        """
        self._user = user
        self._http = httpx.AsyncClient(
            base_url=(base_url or DEFAULT_API_BASE_URL).rstrip("/"),
            timeout=timeout_ms / 1000,
            headers={
                "Accept": "application/vnd.github.v3+json",
                "Authorization": f"token {token}",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    @property
    def user(self) -> str:
        return self._user

    async def file_new_issue(self, metadata: IssueMetadata, repository: str) -> str:
        """Issueを作成する。

        本文はメッセージのパーマリンクのみとする。

        Args:
            metadata: タイトルとパーマリンクを含むメタデータ
            repository: 起票先リポジトリ名(オーナーは含まない)

        Returns:
            作成したIssueのURL(html_url)

        Raises:
            GitHubRequestError: リクエスト失敗または非2xxレスポンスの場合
        """
        path = f"/repos/{self._user}/{repository}/issues"
        logger.debug("POST %s: %s", path, metadata.title)

        try:
            response = await self._http.post(
                path,
                json={"title": metadata.title, "body": metadata.url},
            )
        except httpx.HTTPError as e:
            reason = str(e) or type(e).__name__
            raise GitHubRequestError(f"failed to make GitHub API request: {reason}") from e

        if not response.is_success:
            raise GitHubRequestError(
                f"received {response.status_code} response from GitHub API: {response.text}"
            )

        try:
            return response.json()["html_url"]
        except (ValueError, KeyError, TypeError) as e:
            raise GitHubRequestError(
                f"failed to parse GitHub API response: {response.text}"
            ) from e

    async def close(self) -> None:
        await self._http.aclose()

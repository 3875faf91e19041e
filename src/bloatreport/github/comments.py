"""Create or update the size report comment on a pull request.

One comment per (pull request, toolchain) is kept up to date: existing
comments are listed, the first one written by the bot that mentions the
toolchain is updated in place, and a new comment is created otherwise.

Known limitations:
  - Only the first page of comments (``per_page``, at most 100) is
    searched. On busy pull requests an older report beyond that page is
    not found and a second comment is created.
  - Later duplicates of a matching comment are left untouched.
  - Listing and then writing is not atomic. Two runs for the same
    toolchain racing each other can both create a comment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from bloatreport.config import GitHubConfig
from bloatreport.exceptions import CommentListError, CommentWriteError
from bloatreport.github.context import IssueContext

logger = logging.getLogger("bloatreport.github")


@dataclass(frozen=True)
class IssueComment:
    """An existing comment on an issue."""
    id: int
    author: str
    body: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> IssueComment:
        return cls(
            id=int(data["id"]),
            author=(data.get("user") or {}).get("login", ""),
            body=data.get("body") or "",
        )


@dataclass(frozen=True)
class UpsertResult:
    action: str  # 'created' or 'updated'
    comment_id: int
    duplicates: int = 0  # later matching comments left untouched


def find_existing_comments(
    comments: list[IssueComment], toolchain: str, bot_login: str
) -> list[IssueComment]:
    """Comments written by the bot that mention the toolchain, oldest first."""
    return [c for c in comments if c.author == bot_login and toolchain in c.body]


class CommentClient:
    """Async client for the issue comment endpoints of the GitHub API."""

    def __init__(
        self,
        config: GitHubConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or GitHubConfig()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            token = self.config.token
            if token:
                headers["Authorization"] = f"Bearer {token}"
            self._client = httpx.AsyncClient(headers=headers, timeout=self.config.timeout)
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.config.api_url.rstrip('/')}{path}"

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> CommentClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def list_comments(self, issue: IssueContext) -> list[IssueComment]:
        """List the first page of comments on an issue.

        Raises:
            CommentListError: On a transport error, a non-success status, or a
                body that is not a list of comments.
        """
        url = self._url(f"/repos/{issue.owner}/{issue.repo}/issues/{issue.number}/comments")
        try:
            response = await self._get_client().get(
                url, params={"per_page": self.config.per_page}
            )
        except httpx.HTTPError as e:
            raise CommentListError(issue.number, str(e)) from e

        if not response.is_success:
            raise CommentListError(issue.number, f"HTTP {response.status_code}")

        try:
            return [IssueComment.from_api(item) for item in response.json()]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise CommentListError(issue.number, f"unexpected response body: {e}") from e

    async def create_comment(self, issue: IssueContext, body: str) -> int:
        """Post a new comment and return its id."""
        url = self._url(f"/repos/{issue.owner}/{issue.repo}/issues/{issue.number}/comments")
        data = await self._write("POST", url, body, f"create a comment on #{issue.number}")
        return int(data["id"])

    async def update_comment(self, issue: IssueContext, comment_id: int, body: str) -> int:
        """Replace the body of an existing comment."""
        url = self._url(f"/repos/{issue.owner}/{issue.repo}/issues/comments/{comment_id}")
        data = await self._write("PATCH", url, body, f"update comment {comment_id}")
        return int(data.get("id", comment_id))

    async def _write(self, method: str, url: str, body: str, what: str) -> dict[str, Any]:
        try:
            response = await self._get_client().request(method, url, json={"body": body})
        except httpx.HTTPError as e:
            raise CommentWriteError(f"Could not {what}: {e}") from e
        if not response.is_success:
            raise CommentWriteError(f"Could not {what}: HTTP {response.status_code}")
        return response.json()

    async def create_or_update_comment(
        self, issue: IssueContext, toolchain: str, body: str
    ) -> UpsertResult:
        """Update the bot's comment for ``toolchain``, or create one."""
        logger.info(f"Find comments for issue: {issue.number}")
        comments = await self.list_comments(issue)
        logger.info(
            f"Found {len(comments)} comments. "
            f"Searching for comments containing {toolchain}"
        )

        ours = find_existing_comments(comments, toolchain, self.config.bot_login)
        if not ours:
            logger.info("No existing comment found, creating a new comment")
            comment_id = await self.create_comment(issue, body)
            return UpsertResult(action="created", comment_id=comment_id)

        comment_id = ours[0].id
        logger.info(f"Updating comment with ID {comment_id}")
        await self.update_comment(issue, comment_id, body)
        return UpsertResult(
            action="updated", comment_id=comment_id, duplicates=len(ours) - 1
        )

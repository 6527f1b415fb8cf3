"""GitHub REST client fetching a pull request and its comment threads."""

from __future__ import annotations

from typing import Any

import httpx

from pr_report.errors import UpstreamFetchFailure
from pr_report.github.models import PullRequestComment, PullRequestData
from pr_report.obs.logging import get_logger
from pr_report.types import PullRequestParams

_API_VERSION = "2022-11-28"
_PER_PAGE = 100

logger = get_logger("github")


class GitHubClient:
    """Reads pull-request data over the GitHub REST API.

    A fresh `httpx.AsyncClient` is opened per fetch so the client itself holds
    no connection state and can be shared across concurrent runs.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    async def fetch_pull_request(self, params: PullRequestParams) -> PullRequestData:
        """Fetch the PR, its issue comments and its review comments.

        Raises:
            UpstreamFetchFailure: on any transport error or non-2xx response.
        """

        repo_path = f"/repos/{params.owner}/{params.repo}"
        logger.info(
            "fetch_pull_request",
            owner=params.owner,
            repo=params.repo,
            pull_number=params.pull_number,
        )
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                pull_request = await self._get_json(
                    client, f"{repo_path}/pulls/{params.pull_number}"
                )
                issue_comments = await self._get_all(
                    client, f"{repo_path}/issues/{params.pull_number}/comments"
                )
                review_comments = await self._get_all(
                    client, f"{repo_path}/pulls/{params.pull_number}/comments"
                )
        except httpx.HTTPStatusError as exc:
            raise UpstreamFetchFailure(
                f"GitHub answered {exc.response.status_code} for {exc.request.url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamFetchFailure(f"GitHub request failed: {exc}") from exc

        return PullRequestData(
            title=pull_request["title"],
            author=_login(pull_request) or "ghost",
            body=pull_request.get("body"),
            issue_comments=[_comment(item) for item in issue_comments],
            review_comments=[_comment(item) for item in review_comments],
        )

    @staticmethod
    async def _get_json(client: httpx.AsyncClient, url: str) -> dict[str, Any]:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()

    @staticmethod
    async def _get_all(client: httpx.AsyncClient, url: str) -> list[dict[str, Any]]:
        """Follow `Link: rel="next"` until every page has been read."""
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        params: dict[str, Any] | None = {"per_page": _PER_PAGE}
        while next_url:
            response = await client.get(next_url, params=params)
            response.raise_for_status()
            items.extend(response.json())
            next_url = response.links.get("next", {}).get("url")
            params = None  # the next link already carries the query string
        return items


def _login(item: dict[str, Any]) -> str | None:
    user = item.get("user") or {}
    return user.get("login")


def _comment(item: dict[str, Any]) -> PullRequestComment:
    return PullRequestComment(
        id=item["id"],
        author=_login(item),
        body=item.get("body"),
        parent_comment_id=item.get("in_reply_to_id"),
    )

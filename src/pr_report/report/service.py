"""End-to-end report generation: URL -> fetch -> agent -> `ReportSchema`."""

from __future__ import annotations

from typing import cast

from pr_report.agent.models import ChatModel
from pr_report.agent.orchestrator import AgentOrchestrator
from pr_report.agent.registry import ToolRegistry
from pr_report.agent.schema import ReportSchema
from pr_report.cache.decorator import cached
from pr_report.cache.store import KeyValueStore
from pr_report.config import AgentConfig, CacheConfig
from pr_report.errors import InvalidReference
from pr_report.github.client import GitHubClient
from pr_report.github.models import PullRequestData
from pr_report.github.urls import parse_pull_request_url
from pr_report.obs.logging import get_logger
from pr_report.report.assembler import format_pull_request, parse_report, report_cache_key
from pr_report.types import PullRequestParams

SYSTEM_PROMPT = """
You are a Staff Developer responsible for code review evaluations.
You will receive the pull request (PR) description and a list of
comments on the PR, and you're expected to write a report
of the code review itself.

You *must* use the book Pull Requests and Code Review to know the
best practices. It is very generic, no need to try to get information
about this specific pull request.
""".strip()

FETCH_KEY_PREFIX = "get_pull_request_info_and_comments"

logger = get_logger("report")


def fetch_cache_key(params: PullRequestParams) -> tuple[str, str, str, int]:
    return (FETCH_KEY_PREFIX, params.owner, params.repo, params.pull_number)


class ReportService:
    """Generates review reports, caching both the fetch and the agent run.

    `fetch_pull_request` and `generate_report` are the cached entry points;
    identical inputs inside their TTL are answered from the store.
    """

    def __init__(
        self,
        *,
        github: GitHubClient,
        model: ChatModel,
        tool_registry: ToolRegistry,
        store: KeyValueStore,
        agent_config: AgentConfig | None = None,
        cache_config: CacheConfig | None = None,
    ) -> None:
        cache_config = cache_config or CacheConfig()
        self.orchestrator = AgentOrchestrator(
            model=model,
            tool_registry=tool_registry,
            system_prompt=SYSTEM_PROMPT,
            config=agent_config,
            parse_result=parse_report,
        )
        self.fetch_pull_request = cached(
            github.fetch_pull_request,
            fetch_cache_key,
            cache_config.fetch_ttl,
            store=store,
            result_type=PullRequestData,
        )
        self.generate_report = cached(
            self._generate_report,
            report_cache_key,
            cache_config.report_ttl,
            store=store,
            result_type=ReportSchema,
        )

    async def report_for_url(self, url: str) -> ReportSchema:
        """Resolve a PR URL to its report.

        Raises:
            InvalidReference: `url` is not a GitHub pull-request URL.
            ReportError: any fatal failure of the fetch or the agent run.
        """

        params = parse_pull_request_url(url)
        if params is None:
            raise InvalidReference(url)

        data = await self.fetch_pull_request(params)
        return await self.generate_report(data)

    async def _generate_report(self, data: PullRequestData) -> ReportSchema:
        prompt = format_pull_request(data)
        run = await self.orchestrator.run(prompt)
        report = cast(ReportSchema, run.report)
        logger.info(
            "report_generated",
            title=data.title,
            comments=len(report.comment_reports),
            tool_calls=len(run.tool_traces),
        )
        return report

"""Prompt payload, cache key and result parsing for report generation."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from pr_report.agent.schema import ReportSchema
from pr_report.cache.decorator import hash_text
from pr_report.errors import SchemaValidationFailure
from pr_report.github.models import PullRequestComment, PullRequestData

REPORT_KEY_PREFIX = "generate_pull_request_report"


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" for line in text.strip().split("\n"))


def _comment_header(comment: PullRequestComment) -> str:
    reply = (
        f", in reply to {comment.parent_comment_id}"
        if comment.parent_comment_id is not None
        else ""
    )
    return f"Comment by @{comment.author} (ID: {comment.id}{reply}):"


def _ordered(comments: list[PullRequestComment]) -> list[PullRequestComment]:
    return sorted(
        (c for c in comments if c.author and c.body),
        key=lambda c: c.id,
    )


def format_pull_request(data: PullRequestData) -> str:
    """Serialize the PR and its comments into the agent's human message.

    Issue-level comments come first, then review comments, each sorted by id,
    so that identical data always produces an identical payload.
    """

    lines = [f"Pull Request: '{data.title}' by @{data.author}"]
    lines.append(_quote(data.body) if data.body is not None else "> (no description)")
    lines.append("")

    for comment in _ordered(data.issue_comments) + _ordered(data.review_comments):
        lines.append(_comment_header(comment))
        lines.append(_quote(comment.body or ""))
        lines.append("")

    return "\n".join(lines) + "\n"


def report_cache_key(data: PullRequestData) -> tuple[str, str]:
    return (REPORT_KEY_PREFIX, hash_text(format_pull_request(data)))


def parse_report(args: dict[str, Any]) -> ReportSchema:
    """Validate the terminal tool call's arguments.

    Raises:
        SchemaValidationFailure: the arguments do not form a `ReportSchema`.
    """

    try:
        return ReportSchema.model_validate(args)
    except ValidationError as exc:
        raise SchemaValidationFailure(str(exc)) from exc

"""Pull-request data as fetched from GitHub.

These are pydantic models rather than dataclasses because fetched data goes
through the JSON cache.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PullRequestComment(BaseModel):
    id: int
    author: str | None = None
    body: str | None = None
    parent_comment_id: int | None = None


class PullRequestData(BaseModel):
    title: str
    author: str
    body: str | None = None
    issue_comments: list[PullRequestComment] = Field(default_factory=list)
    review_comments: list[PullRequestComment] = Field(default_factory=list)

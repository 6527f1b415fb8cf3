"""Shared fixtures: scripted model, sample PR data, indexed book store."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from langchain_core.messages import AIMessage, BaseMessage

from pr_report.agent.models import ChatModel
from pr_report.agent.registry import ToolRegistry
from pr_report.agent.tools import RESPONSE_TOOL_NAME, RETRIEVAL_TOOL_NAME, register_report_tools
from pr_report.github.models import PullRequestComment, PullRequestData
from pr_report.ingest.embedder import HashingEmbedder
from pr_report.retrieval.vector_store import InMemoryVectorStore
from pr_report.types import Chunk

BOOK_PASSAGES = [
    "Use the right tone in your comments and phrase requests as questions",
    "Assign the right reviewers to your PR so feedback arrives quickly",
    "Be your PR first reviewer and read the diff before asking others",
]


class ScriptedChatModel(ChatModel):
    """Replays a fixed list of AI turns and records what it was shown."""

    def __init__(self, turns: list[AIMessage]) -> None:
        self.turns = list(turns)
        self.received: list[list[BaseMessage]] = []

    @property
    def calls(self) -> int:
        return len(self.received)

    async def invoke(
        self, messages: Sequence[BaseMessage], registry: ToolRegistry
    ) -> AIMessage:
        self.received.append(list(messages))
        if not self.turns:
            raise AssertionError("scripted model ran out of turns")
        return self.turns.pop(0)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def tool_call(name: str, args: dict[str, Any], call_id: str) -> dict[str, Any]:
    return {"name": name, "args": args, "id": call_id}


def retrieve_turn(query: str, call_id: str = "call_retrieve") -> AIMessage:
    return AIMessage(content="", tool_calls=[tool_call(RETRIEVAL_TOOL_NAME, {"query": query}, call_id)])


def respond_turn(args: dict[str, Any], call_id: str = "call_response") -> AIMessage:
    return AIMessage(content="", tool_calls=[tool_call(RESPONSE_TOOL_NAME, args, call_id)])


@pytest.fixture
def report_args() -> dict[str, Any]:
    return {
        "descriptionReport": "The description explains the change and links the issue.",
        "descriptionReportBookReferences": ["Make people want to review your PR"],
        "descriptionGrade": "A",
        "descriptionGradeReasoning": "Complete context and an inviting tone.",
        "commentReports": [
            {
                "commentId": 10,
                "isAutomated": False,
                "commentReport": "Asks for tests politely.",
                "commentReportBookReferences": ["Use the right tone in your comments"],
                "commentGrade": "B",
                "commentGradeReasoning": "Constructive but could say whether it blocks approval.",
            }
        ],
    }


@pytest.fixture
def pull_request() -> PullRequestData:
    return PullRequestData(
        title="Add retry to uploader",
        author="alice",
        body="Adds retries.\n\nFixes #12\n",
        issue_comments=[
            PullRequestComment(id=20, author="bob", body="LGTM"),
            PullRequestComment(id=10, author="carol", body="Can you add tests?"),
        ],
        review_comments=[
            PullRequestComment(id=31, author="alice", body="Done", parent_comment_id=30),
            PullRequestComment(id=30, author="bob", body="Nit: rename this"),
        ],
    )


@pytest.fixture
def book_store() -> InMemoryVectorStore:
    store = InMemoryVectorStore(HashingEmbedder())
    store.index(
        [
            Chunk(text=text, source_offset=i * 100, metadata={"chapter": str(i)})
            for i, text in enumerate(BOOK_PASSAGES)
        ]
    )
    return store


@pytest.fixture
def registry(book_store: InMemoryVectorStore) -> ToolRegistry:
    tool_registry = ToolRegistry()
    register_report_tools(tool_registry, book_store)
    return tool_registry

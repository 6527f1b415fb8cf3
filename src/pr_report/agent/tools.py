"""Tools exposed to the review agent."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pr_report.agent.registry import ToolRegistry, ToolSpec
from pr_report.agent.schema import ReportSchema
from pr_report.config import RetrievalConfig
from pr_report.retrieval.vector_store import InMemoryVectorStore

RETRIEVAL_TOOL_NAME = "retrieve_pull_requests_code_review"
RESPONSE_TOOL_NAME = "Response"

RETRIEVAL_TOOL_DESCRIPTION = """
A book containing good practice for pull requests and code review.
Here is its outline:
  - Create your PR before the code is ready for review
  - Make people want to review your PR
  - Be your PR's first reviewer
  - Assign the right reviewers to your PR
  - Be responsive to comments
  - If you want people to review your PRs, you have to review theirs
  - You can review code even if you are a junior developer
  - Check the right things during code review
  - Use the right tone in your comments
  - Be clear about whether a change is required for you to approve the PR or not
  - Review your review before submitting it
  - Approve the PR when the submitter made all the changes you asked
  - Some conflicts can't be solved in comments
""".strip()

RESPONSE_TOOL_DESCRIPTION = "Always respond to the user using this tool."

CHUNK_SEPARATOR = "\n\n"


class RetrieveToolInput(BaseModel):
    query: str = Field(min_length=1, description="query to look up in retriever")


def register_report_tools(
    registry: ToolRegistry,
    vector_store: InMemoryVectorStore,
    *,
    config: RetrievalConfig | None = None,
) -> None:
    """Register the two tools a review run relies on.

    Tools:
    - `retrieve_pull_requests_code_review`: nearest book passages for a query.
    - `Response`: terminal tool whose arguments are the final `ReportSchema`.
    """

    top_k = (config or RetrievalConfig()).top_k

    def _retrieve(input_data: RetrieveToolInput) -> str:
        chunks = vector_store.query(input_data.query, top_k)
        if not chunks:
            return "NO_RESULTS"
        return CHUNK_SEPARATOR.join(chunk.text for chunk in chunks)

    def _respond(input_data: ReportSchema) -> str:
        del input_data  # the arguments are the result; nothing to execute.
        return ""

    registry.register(
        ToolSpec(
            name=RETRIEVAL_TOOL_NAME,
            description=RETRIEVAL_TOOL_DESCRIPTION,
            args_schema=RetrieveToolInput,
            handler=_retrieve,
            tags=["retrieval", "rag"],
        )
    )
    registry.register(
        ToolSpec(
            name=RESPONSE_TOOL_NAME,
            description=RESPONSE_TOOL_DESCRIPTION,
            args_schema=ReportSchema,
            handler=_respond,
            terminal=True,
            tags=["structured-output"],
        )
    )

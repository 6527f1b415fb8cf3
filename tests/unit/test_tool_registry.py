import pytest
from pydantic import BaseModel, Field, ValidationError

from pr_report.agent.registry import ToolRegistry, ToolSpec
from pr_report.agent.tools import RESPONSE_TOOL_NAME, RETRIEVAL_TOOL_NAME, register_report_tools
from pr_report.errors import IndexUnavailable, ToolConfigurationError
from pr_report.ingest.embedder import HashingEmbedder
from pr_report.retrieval.vector_store import InMemoryVectorStore


class EchoInput(BaseModel):
    value: int = Field(ge=1)


def _echo_spec() -> ToolSpec:
    def _handler(data: EchoInput) -> str:
        return str(data.value)

    return ToolSpec(
        name="echo",
        description="echo positive int",
        args_schema=EchoInput,
        handler=_handler,
    )


def test_tool_registry_validation() -> None:
    registry = ToolRegistry()
    registry.register(_echo_spec())

    assert registry.execute("echo", {"value": 3}) == "3"

    with pytest.raises(ValidationError):
        registry.execute("echo", {"value": 0})


def test_duplicate_tool_registration_rejected() -> None:
    registry = ToolRegistry()
    spec = _echo_spec()

    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_unknown_tool_is_a_configuration_error() -> None:
    registry = ToolRegistry()

    with pytest.raises(ToolConfigurationError):
        registry.execute("missing", {})


def test_report_tools_registered(registry: ToolRegistry) -> None:
    names = [spec.name for spec in registry.specs()]

    assert names == [RETRIEVAL_TOOL_NAME, RESPONSE_TOOL_NAME]
    assert registry.get(RESPONSE_TOOL_NAME).terminal
    assert not registry.get(RETRIEVAL_TOOL_NAME).terminal
    assert [tool["function"]["name"] for tool in registry.tool_definitions()] == names


def test_retrieval_tool_joins_matched_chunks(registry: ToolRegistry) -> None:
    output = registry.execute(
        RETRIEVAL_TOOL_NAME,
        {"query": "Use the right tone in your comments and phrase requests as questions"},
    )

    passages = output.split("\n\n")
    assert len(passages) == 3
    assert passages[0] == "Use the right tone in your comments and phrase requests as questions"


def test_retrieval_tool_reports_empty_corpus_and_missing_index() -> None:
    empty = InMemoryVectorStore(HashingEmbedder())
    empty.index([])
    registry = ToolRegistry()
    register_report_tools(registry, empty)
    assert registry.execute(RETRIEVAL_TOOL_NAME, {"query": "tone"}) == "NO_RESULTS"

    unindexed = ToolRegistry()
    register_report_tools(unindexed, InMemoryVectorStore(HashingEmbedder()))
    with pytest.raises(IndexUnavailable):
        unindexed.execute(RETRIEVAL_TOOL_NAME, {"query": "tone"})

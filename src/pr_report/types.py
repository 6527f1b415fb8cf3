"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ParsedDocument:
    """A loaded reference document before chunking."""

    doc_id: str
    text: str
    metadata: dict[str, str]


@dataclass(frozen=True, slots=True)
class Chunk:
    """A bounded slice of a reference document prepared for indexing."""

    text: str
    source_offset: int
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class IndexedChunk:
    """A chunk together with the embedding it was indexed under."""

    chunk: Chunk
    embedding: list[float]


@dataclass(frozen=True, slots=True)
class PullRequestParams:
    """Coordinates of one pull request on GitHub."""

    owner: str
    repo: str
    pull_number: int


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float

"""In-memory vector store over the reference corpus."""

from __future__ import annotations

import json
from collections.abc import Callable
from math import sqrt
from pathlib import Path
from typing import TypeVar

from pr_report.errors import EmbeddingFailure, IndexUnavailable
from pr_report.ingest.embedder import Embedder
from pr_report.obs.logging import get_logger
from pr_report.types import Chunk, IndexedChunk

METRIC = "cosine"

_T = TypeVar("_T")

logger = get_logger("vector_store")


class InMemoryVectorStore:
    """Cosine-similarity store holding every indexed chunk in memory.

    The corpus is held as a tuple that is swapped, never mutated, so any number
    of concurrent `query` calls can run while an `index` call replaces it.
    """

    def __init__(self, embedder: Embedder) -> None:
        self.embedder = embedder
        self._records: tuple[IndexedChunk, ...] | None = None

    def __len__(self) -> int:
        return len(self._records or ())

    @property
    def is_indexed(self) -> bool:
        return self._records is not None

    def index(self, chunks: list[Chunk], *, replace: bool = False) -> None:
        """Embed and bulk-load chunks, appending unless `replace` is set."""
        embeddings = self._embed(lambda: self.embedder.embed_documents([c.text for c in chunks]))
        if len(embeddings) != len(chunks):
            raise EmbeddingFailure(
                f"embedder returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )
        self.load(
            [IndexedChunk(chunk=chunk, embedding=vector) for chunk, vector in zip(chunks, embeddings, strict=True)],
            replace=replace,
        )

    def load(self, records: list[IndexedChunk], *, replace: bool = False) -> None:
        """Load pre-embedded chunks."""
        existing = () if replace or self._records is None else self._records
        self._records = existing + tuple(records)
        logger.info("index_loaded", added=len(records), total=len(self._records))

    def query(self, text: str, k: int) -> list[Chunk]:
        """Return the `k` chunks closest to `text`, most relevant first."""
        records = self._records
        if records is None:
            raise IndexUnavailable("the retrieval store has not been indexed")

        query_embedding = self._embed(lambda: self.embedder.embed_query(text))
        ranked = sorted(
            records,
            key=lambda record: _cosine_similarity(query_embedding, record.embedding),
            reverse=True,
        )
        return [record.chunk for record in ranked[:k]]

    def save(self, path: str | Path) -> None:
        """Persist the index as JSON next to the metric and embedder it used."""
        if self._records is None:
            raise IndexUnavailable("nothing to save: the retrieval store has not been indexed")
        payload = {
            "metric": METRIC,
            "embedder": self.embedder.name,
            "chunks": [
                {
                    "text": record.chunk.text,
                    "source_offset": record.chunk.source_offset,
                    "metadata": record.chunk.metadata,
                    "embedding": record.embedding,
                }
                for record in self._records
            ],
        }
        Path(path).write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    @classmethod
    def from_file(cls, path: str | Path, embedder: Embedder) -> "InMemoryVectorStore":
        """Load an index written by `save`.

        Raises:
            IndexUnavailable: the file is missing, unreadable or malformed, or
                was built with another metric or embedder than the one queries
                will use.
        """

        file_path = Path(path)
        if not file_path.exists():
            raise IndexUnavailable(f"index file not found: {file_path}")

        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise IndexUnavailable(f"unreadable index file {file_path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise IndexUnavailable(f"index file {file_path} does not hold an index object")

        if payload.get("metric") != METRIC:
            raise IndexUnavailable(
                f"index built with metric {payload.get('metric')!r}, expected {METRIC!r}"
            )
        if payload.get("embedder") != embedder.name:
            raise IndexUnavailable(
                f"index built with embedder {payload.get('embedder')!r}, queries use {embedder.name!r}"
            )

        try:
            records = [
                IndexedChunk(
                    chunk=Chunk(
                        text=item["text"],
                        source_offset=int(item["source_offset"]),
                        metadata={str(k): str(v) for k, v in item.get("metadata", {}).items()},
                    ),
                    embedding=[float(value) for value in item["embedding"]],
                )
                for item in payload.get("chunks", [])
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise IndexUnavailable(f"malformed index file {file_path}: {exc!r}") from exc

        store = cls(embedder)
        store.load(records)
        return store

    @staticmethod
    def _embed(call: Callable[[], _T]) -> _T:
        try:
            return call()
        except Exception as exc:
            logger.error("embedding_failed", error=str(exc))
            raise EmbeddingFailure(str(exc)) from exc


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)

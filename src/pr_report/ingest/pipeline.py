"""Offline corpus build: load -> chunk -> embed -> index -> persist."""

from __future__ import annotations

from pathlib import Path

from pr_report.ingest.chunker import RecursiveCharacterChunker
from pr_report.ingest.parser import ParserRegistry
from pr_report.obs.logging import get_logger
from pr_report.retrieval.vector_store import InMemoryVectorStore
from pr_report.types import Chunk

logger = get_logger("corpus")


class CorpusBuilder:
    """Populates the retrieval store the agent's retrieval tool reads from.

    Runs once, ahead of any report generation; the persisted index is then
    loaded at start-up with `InMemoryVectorStore.from_file`.
    """

    def __init__(
        self,
        parser_registry: ParserRegistry,
        chunker: RecursiveCharacterChunker,
        vector_store: InMemoryVectorStore,
    ) -> None:
        self._parser_registry = parser_registry
        self._chunker = chunker
        self._vector_store = vector_store

    def build(
        self,
        path: str | Path,
        *,
        doc_id: str | None = None,
        extra_metadata: dict[str, str] | None = None,
    ) -> list[Chunk]:
        """Index a single reference document and return its chunks."""

        parsed = self._parser_registry.parse_path(path, doc_id=doc_id)
        if extra_metadata:
            parsed.metadata.update(extra_metadata)

        chunks = self._chunker.chunk_document(parsed)
        self._vector_store.index(chunks)
        logger.info("document_indexed", doc_id=parsed.doc_id, chunks=len(chunks))
        return chunks

    def build_and_save(self, paths: list[str | Path], output: str | Path) -> list[Chunk]:
        """Index many documents and persist the resulting store."""

        all_chunks: list[Chunk] = []
        for path in paths:
            all_chunks.extend(self.build(path))
        self._vector_store.save(output)
        logger.info("index_saved", output=str(output), chunks=len(all_chunks))
        return all_chunks

"""Overlapping character-window chunking implementation."""

from __future__ import annotations

import re
from collections.abc import Callable

from pr_report.config import ChunkingConfig
from pr_report.types import Chunk, ParsedDocument

_SENTENCE_END = re.compile(r"[.!?。！？]\s")
_WHITESPACE = re.compile(r"\s")


def _last_paragraph_break(text: str, lo: int, hi: int) -> int | None:
    idx = text.rfind("\n\n", lo, hi)
    return None if idx == -1 else idx + 2


def _last_match(pattern: re.Pattern[str]) -> Callable[[str, int, int], int | None]:
    def _find(text: str, lo: int, hi: int) -> int | None:
        end = None
        for match in pattern.finditer(text, lo, hi):
            end = match.end()
        return end

    return _find


# Cut-point finders in priority order. Each returns the end offset of the
# chunk (exclusive) or None when the window holds no such boundary.
_BOUNDARIES: tuple[Callable[[str, int, int], int | None], ...] = (
    _last_paragraph_break,
    _last_match(_SENTENCE_END),
    _last_match(_WHITESPACE),
)


class RecursiveCharacterChunker:
    """Splits documents into overlapping windows of at most `chunk_size` chars.

    Design notes:
    1. Window first.
       Each chunk starts at `start` and may extend to `start + chunk_size`.

    2. Semantic cut second.
       Inside that window the chunk ends at the last paragraph break; failing
       that at the last sentence end; failing that at the last whitespace.
       Only when none of these exist does the chunk end with a hard cut at
       `chunk_size` characters.

    3. Overlap.
       The next chunk starts exactly `chunk_overlap` characters before the end
       of the previous one, so dropping the first `chunk_overlap` characters
       of every chunk after the first reassembles the document. Cut points are
       only accepted beyond `start + chunk_overlap`, which guarantees progress.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()
        if self.config.chunk_overlap >= self.config.chunk_size:
            raise ValueError("chunk_overlap must be less than chunk_size")

    def chunk_document(self, document: ParsedDocument) -> list[Chunk]:
        """Chunk a loaded document, tagging each chunk with its metadata."""
        return self.split_text(document.text, {**document.metadata, "doc_id": document.doc_id})

    def split_text(self, text: str, metadata: dict[str, str] | None = None) -> list[Chunk]:
        overlap = self.config.chunk_overlap
        base = dict(metadata or {})

        chunks: list[Chunk] = []
        start = 0
        while start < len(text):
            end = self._cut_point(text, start)
            chunks.append(
                Chunk(
                    text=text[start:end],
                    source_offset=start,
                    metadata={**base, "chunk_index": str(len(chunks))},
                )
            )
            if end >= len(text):
                break
            start = end - overlap

        return chunks

    def _cut_point(self, text: str, start: int) -> int:
        hard_end = start + self.config.chunk_size
        if hard_end >= len(text):
            return len(text)

        lo = start + self.config.chunk_overlap
        for find in _BOUNDARIES:
            end = find(text, lo, hard_end)
            if end is not None and end > lo:
                return end
        return hard_end

    @staticmethod
    def reassemble(chunks: list[Chunk], overlap: int) -> str:
        """Concatenate the non-overlapping part of every chunk."""
        if not chunks:
            return ""
        return chunks[0].text + "".join(chunk.text[overlap:] for chunk in chunks[1:])

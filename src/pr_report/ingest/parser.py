"""Loaders turning reference files into `ParsedDocument`s."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pr_report.types import ParsedDocument


class Parser(ABC):
    """Base parser interface used by the corpus builder."""

    extensions: tuple[str, ...] = ()
    format: str = ""

    @abstractmethod
    def parse(self, path: Path, *, doc_id: str | None = None) -> ParsedDocument:
        """Parse a file into normalized text + metadata."""


class TextParser(Parser):
    """Parser for plain text documents."""

    extensions = (".txt",)
    format = "text"

    def parse(self, path: Path, *, doc_id: str | None = None) -> ParsedDocument:
        text = path.read_text(encoding="utf-8")
        return ParsedDocument(
            doc_id=doc_id or path.stem,
            text=text,
            metadata={"source": str(path), "format": self.format},
        )


class MarkdownParser(TextParser):
    """Parser for markdown documents such as the book manuscript."""

    extensions = (".md", ".markdown")
    format = "markdown"


class ParserRegistry:
    """Maps file extension to parser implementation."""

    def __init__(self, parsers: list[Parser] | None = None) -> None:
        self._parsers: dict[str, Parser] = {}
        for parser in parsers or [TextParser(), MarkdownParser()]:
            self.register(parser)

    def register(self, parser: Parser) -> None:
        for extension in parser.extensions:
            self._parsers[extension.lower()] = parser

    def parse_path(self, path: str | Path, *, doc_id: str | None = None) -> ParsedDocument:
        file_path = Path(path)
        parser = self._parsers.get(file_path.suffix.lower())
        if parser is None:
            raise ValueError(f"No parser registered for extension: {file_path.suffix}")
        return parser.parse(file_path, doc_id=doc_id)

"""Builds the production object graph from `Settings`."""

from __future__ import annotations

from pr_report.agent.models import OpenAIChatModel
from pr_report.agent.registry import ToolRegistry
from pr_report.agent.tools import register_report_tools
from pr_report.cache.store import SqliteKeyValueStore
from pr_report.config import Settings
from pr_report.github.client import GitHubClient
from pr_report.ingest.chunker import RecursiveCharacterChunker
from pr_report.ingest.embedder import Embedder, OpenAIEmbedder
from pr_report.ingest.parser import ParserRegistry
from pr_report.ingest.pipeline import CorpusBuilder
from pr_report.report.service import ReportService
from pr_report.retrieval.vector_store import InMemoryVectorStore


def build_embedder(settings: Settings) -> Embedder:
    return OpenAIEmbedder(settings.embedding_model, api_key=settings.openai_api_key)


def build_report_service(settings: Settings) -> ReportService:
    """Wire the report service; the corpus index must already exist on disk."""

    vector_store = InMemoryVectorStore.from_file(settings.corpus_path, build_embedder(settings))
    registry = ToolRegistry()
    register_report_tools(registry, vector_store, config=settings.retrieval)

    return ReportService(
        github=GitHubClient(token=settings.github_token, base_url=settings.github_api_url),
        model=OpenAIChatModel(settings.openai_model, api_key=settings.openai_api_key),
        tool_registry=registry,
        store=SqliteKeyValueStore(settings.cache_path),
        agent_config=settings.agent,
        cache_config=settings.cache,
    )


def build_corpus_builder(settings: Settings) -> CorpusBuilder:
    return CorpusBuilder(
        ParserRegistry(),
        RecursiveCharacterChunker(settings.chunking),
        InMemoryVectorStore(build_embedder(settings)),
    )

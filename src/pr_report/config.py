"""Configuration models for the report agent."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingConfig(BaseModel):
    """Configures character-window chunking of the reference corpus."""

    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be less than chunk_size")
        return self


class RetrievalConfig(BaseModel):
    """Configures how many chunks the retrieval tool hands back."""

    top_k: int = Field(default=4, ge=1)


class AgentConfig(BaseModel):
    """Bounds one agent run."""

    max_tool_cycles: int = Field(default=12, ge=1)
    timeout_seconds: float = Field(default=300.0, gt=0.0)


class CacheConfig(BaseModel):
    """Time-to-live of each cached step."""

    fetch_ttl_seconds: float = Field(default=60.0, gt=0.0)
    report_ttl_seconds: float = Field(default=24 * 60 * 60.0, gt=0.0)

    @property
    def fetch_ttl(self) -> timedelta:
        return timedelta(seconds=self.fetch_ttl_seconds)

    @property
    def report_ttl(self) -> timedelta:
        return timedelta(seconds=self.report_ttl_seconds)


class Settings(BaseSettings):
    """Process settings loaded from the environment (and `.env` if present).

    Usage:
        from pr_report.config import get_settings
        settings = get_settings()
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-small"

    github_token: str | None = None
    github_api_url: str = "https://api.github.com"

    cache_path: str = "pr_report_cache.db"
    corpus_path: str = "book-pr-index.json"

    log_level: str = "INFO"
    log_json: bool = False

    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


def get_settings() -> Settings:
    return Settings()

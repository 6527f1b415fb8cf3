"""Pull-request review report agent package."""

from .agent.schema import CommentReport, ReportSchema
from .config import AgentConfig, CacheConfig, ChunkingConfig, RetrievalConfig

__all__ = [
    "AgentConfig",
    "CacheConfig",
    "ChunkingConfig",
    "CommentReport",
    "ReportSchema",
    "RetrievalConfig",
]

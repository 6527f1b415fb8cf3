"""Failure kinds raised while producing a report.

Every fatal kind derives from `ReportError` so entry points can tell a failed
run apart from a programming error. `CacheWriteFailure` is the one non-fatal
kind: the cache decorator logs it and carries on.
"""

from __future__ import annotations


class ReportError(Exception):
    """Base class for failures of a report-generation run."""


class InvalidReference(ReportError):
    """The input is not a GitHub pull-request URL."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Invalid GitHub pull request URL: {reference}")
        self.reference = reference


class UpstreamFetchFailure(ReportError):
    """Pull-request data could not be fetched (network, auth, 4xx/5xx)."""


class RetrievalError(ReportError):
    """Base class for retrieval-store failures."""


class IndexUnavailable(RetrievalError):
    """The store was queried before any corpus was loaded."""


class EmbeddingFailure(RetrievalError):
    """The embedding backend raised while embedding text."""


class ModelInvocationFailure(ReportError):
    """The chat model call failed or returned something other than a message."""


class SchemaValidationFailure(ReportError):
    """The terminal tool call did not carry a valid `ReportSchema`."""


class AgentBudgetExceeded(ReportError):
    """The agent exceeded its tool-cycle count or wall-clock budget."""


class ToolConfigurationError(ReportError):
    """A tool name could not be resolved against the registry."""


class CacheWriteFailure(ReportError):
    """A cache entry could not be persisted. Never fails the wrapped call."""

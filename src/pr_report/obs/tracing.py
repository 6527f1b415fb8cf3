"""Timing helpers shared by the tool registry and the orchestrator."""

from __future__ import annotations

import time


class Timer:
    """Simple context timer."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0


def preview(text: str, limit: int = 320) -> str:
    """Clip tool output for traces and log lines."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."

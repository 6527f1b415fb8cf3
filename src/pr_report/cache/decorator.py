"""Content-addressed, TTL-bounded memoization for async callables."""

from __future__ import annotations

import functools
import hashlib
import inspect
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from pr_report.cache.store import CacheKey, KeyValueStore
from pr_report.obs.logging import get_logger

# Bump when the shape of any cached value changes: older entries are then
# never matched again.
CACHE_VERSION = "v2"

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T")

KeyParts = Sequence[str | int]
KeyDeriver = Callable[P, KeyParts | Awaitable[KeyParts]]

logger = get_logger("cache")


class CacheEntry(BaseModel, Generic[T]):
    key: list[str]
    timestamp: datetime
    value: T


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hash_text(message: str) -> str:
    """SHA-256 hex digest of `message`."""
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def cached(
    fn: Callable[P, Awaitable[R]],
    key_for_params: KeyDeriver[P],
    ttl: timedelta,
    *,
    store: KeyValueStore,
    result_type: type[R],
    clock: Callable[[], datetime] = utc_now,
    version: str = CACHE_VERSION,
) -> Callable[P, Awaitable[R]]:
    """Wrap `fn` so results are served from `store` while younger than `ttl`.

    Args:
        fn: The coroutine function to memoize.
        key_for_params: Maps the call's arguments to the logical key parts.
            It receives exactly the arguments `fn` receives and may be async.
        ttl: Maximum age of an entry still served as a hit.
        store: Persistent key-value store shared by all callers.
        result_type: Type of `fn`'s result, used to (de)serialize entries.
        clock: Source of "now"; must return timezone-aware datetimes.
        version: Prefix of every key.

    A write failure is logged and ignored; the computed result is returned
    either way.
    """

    entry_model = CacheEntry[result_type]  # type: ignore[valid-type]

    @functools.wraps(fn)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        parts = key_for_params(*args, **kwargs)
        if inspect.isawaitable(parts):
            parts = await parts
        key: CacheKey = (version, *(str(part) for part in parts))

        raw = await store.get(key)
        if raw is not None:
            entry = _decode(entry_model, raw, key)
            if entry is not None:
                age = clock() - entry.timestamp
                if age < ttl:
                    logger.info("cache_hit", key=list(key), age_seconds=age.total_seconds())
                    return entry.value
                logger.info("cache_stale", key=list(key), age_seconds=age.total_seconds())

        logger.info("cache_miss", key=list(key))
        result = await fn(*args, **kwargs)
        try:
            entry = entry_model(key=list(key), timestamp=clock(), value=result)
            await store.set(key, entry.model_dump_json())
        except Exception as exc:  # write failures never fail the call
            logger.warning("cache_write_failed", key=list(key), error=str(exc))
        return result

    return wrapper


def _decode(entry_model: type[CacheEntry[Any]], raw: str, key: CacheKey) -> CacheEntry[Any] | None:
    try:
        return entry_model.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("cache_entry_undecodable", key=list(key), error=str(exc))
        return None

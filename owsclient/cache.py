"""In-memory cache of fetched documents.

The cache stores the future of each fetch-and-parse operation, not the result.
That way, concurrent callers that ask for the same document share the same
pending operation, and the producer only runs once per key.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from lru import LRU

from owsclient import conf

T = TypeVar("T")

logger = logging.getLogger(__name__)

__all__ = ("use_cache", "clear_cache")

_futures: LRU | None = None


def _get_futures() -> LRU:
    global _futures
    if _futures is None:
        _futures = LRU(conf.OWSCLIENT_CACHE_SIZE)
    return _futures


def use_cache(
    producer: Callable[[], Awaitable[T]], service_type: str, operation_kind: str, key: str
) -> asyncio.Future[T]:
    """Return the future for the given key, starting the producer when it's not known yet.

    This needs to be called while an event loop is running.
    Entries are only replaced when the least-recently-used ones are evicted,
    or when :func:`clear_cache` is called.
    """
    cache_key = (service_type, operation_kind, key)
    futures = _get_futures()
    try:
        future = futures[cache_key]
    except KeyError:
        logger.debug("Starting %s %s for %s", service_type, operation_kind, key)
        future = asyncio.ensure_future(producer())
        futures[cache_key] = future
    else:
        logger.debug("Reusing %s %s for %s", service_type, operation_kind, key)
    return future


def clear_cache():
    """Forget all cached documents."""
    global _futures
    if _futures is not None:
        _futures.clear()
    _futures = None

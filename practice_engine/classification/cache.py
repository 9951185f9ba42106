"""
In-process cache for semantic topic classifications.

Keys are normalised problem texts (lower-cased, trimmed, whitespace
collapsed). Entries expire on read once older than the TTL; there is no
other eviction. Concurrent writers simply overwrite each other, which is
harmless because the cached value depends only on the key.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from practice_engine.core.topics import Topic

_WHITESPACE = re.compile(r"\s+")


def normalize_problem_text(problem_text: str) -> str:
    return _WHITESPACE.sub(" ", problem_text.strip().lower())


@dataclass(frozen=True)
class CacheEntry:
    topic: Topic
    stored_at: float


class ClassificationCache:
    """Topic cache with TTL-on-read expiry."""

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, problem_text: str) -> Topic | None:
        key = normalize_problem_text(problem_text)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.stored_at > self.ttl_seconds:
            self._entries.pop(key, None)
            logger.debug("Classification cache entry expired")
            return None

        logger.debug("Classification cache hit: {}", entry.topic.value)
        return entry.topic

    def set(self, problem_text: str, topic: Topic) -> None:
        key = normalize_problem_text(problem_text)
        self._entries[key] = CacheEntry(topic=topic, stored_at=self._clock())

    def clear(self) -> int:
        """Drop every entry; returns how many were dropped."""
        size = len(self._entries)
        self._entries.clear()
        logger.info("Cleared {} cached classifications", size)
        return size

    def stats(self) -> dict[str, float]:
        return {"size": len(self._entries), "ttl_seconds": self.ttl_seconds}

    def __len__(self) -> int:
        return len(self._entries)

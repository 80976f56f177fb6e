"""Statement level result cache.

Executing a statement whose compiled text was executed before returns the
same :class:`~sqlfake.core.result.Result`, rewound to before its first row,
instead of looking the expectation up again. A result whose fields were
written to is never handed out again.

Components:
- CacheStats: hit, miss and skipped counters
- StatementCache: compiled query hash to result mapping
- get_default_statement_cache: the process-wide instance
"""

import hashlib
from typing import TYPE_CHECKING, Optional

from mypy_extensions import mypyc_attr

from sqlfake.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfake.core.result import Result

__all__ = (
    "CacheStats",
    "StatementCache",
    "clear_default_statement_cache",
    "get_default_statement_cache",
    "make_cache_key",
)

logger = get_logger("sqlfake.core.cache")

CACHE_STATS_SLOTS = ("hits", "misses", "skipped", "total_operations")


def make_cache_key(compiled_query: str) -> str:
    """Content hash of a compiled query."""
    return hashlib.md5(compiled_query.encode("utf-8"), usedforsecurity=False).hexdigest()


@mypyc_attr(allow_interpreted_subclasses=False)
class CacheStats:
    """Cache statistics tracking."""

    __slots__ = CACHE_STATS_SLOTS

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.skipped = 0
        self.total_operations = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def record_hit(self) -> None:
        self.hits += 1
        self.total_operations += 1

    def record_miss(self) -> None:
        self.misses += 1
        self.total_operations += 1

    def record_skipped(self) -> None:
        """Record a lookup that found a modified result."""
        self.skipped += 1
        self.record_miss()

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.skipped = 0
        self.total_operations = 0

    def __repr__(self) -> str:
        return (
            f"CacheStats(hit_rate={self.hit_rate:.1f}%, "
            f"hits={self.hits}, misses={self.misses}, skipped={self.skipped}, ops={self.total_operations})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementCache:
    """Mapping of compiled query hashes to the result last produced for them.

    Entries are only replaced by a later ``put`` for the same key. There is no
    size bound and no expiry.
    """

    __slots__ = ("_cache", "_stats")

    def __init__(self) -> None:
        self._cache: "dict[str, Result]" = {}
        self._stats = CacheStats()

    def get(self, key: str) -> "Optional[Result]":
        """Return the cached, unmodified result for ``key``."""
        result = self._cache.get(key)
        if result is None:
            self._stats.record_miss()
            return None
        if result.is_modified:
            self._stats.record_skipped()
            logger.debug("Skipping modified cached result for %s", result.query)
            return None
        self._stats.record_hit()
        return result

    def put(self, key: str, result: "Result") -> None:
        self._cache[key] = result

    def clear(self) -> None:
        """Clear all cache entries and statistics."""
        self._cache.clear()
        self._stats.reset()

    def get_stats(self) -> CacheStats:
        return self._stats

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache


_default_statement_cache: Optional[StatementCache] = None


def get_default_statement_cache() -> StatementCache:
    """Get the process-wide statement cache.

    Returns:
        Singleton statement cache instance
    """
    global _default_statement_cache
    if _default_statement_cache is None:
        _default_statement_cache = StatementCache()
    return _default_statement_cache


def clear_default_statement_cache() -> None:
    """Clear the process-wide statement cache, e.g. between tests."""
    if _default_statement_cache is not None:
        _default_statement_cache.clear()

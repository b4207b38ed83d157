"""In-process LRU cache for amortization tables keyed by approval terms.

Identical (amount, rate, tenure) decisions produce identical tables, so the
table is computed once and shared. The cache is an explicit object: the
caller constructs it and passes it to whatever needs it.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from lending.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionKey:
    amount: Decimal
    rate: Decimal
    tenure: int


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int
    size: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class DecisionCache:
    def __init__(self, max_size: int | None = None):
        self.max_size = settings.decision_cache_size if max_size is None else max_size
        if self.max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {self.max_size}")
        self._entries: OrderedDict[DecisionKey, Any] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: DecisionKey) -> bool:
        with self._lock:
            return key in self._entries

    def get_or_compute(self, key: DecisionKey, compute: Callable[[], Any]) -> Any:
        """Return the cached value for `key`, computing and storing it on a miss.

        `compute` runs outside the lock. Two threads missing on the same key
        both compute; the first stored value wins and is returned to both.
        """
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._hits += 1
                logger.debug("Decision cache hit: %s", key)
                return self._entries[key]
            self._misses += 1

        logger.debug("Decision cache miss: %s", key)
        value = compute()

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                return self._entries[key]
            self._entries[key] = value
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Decision cache evicted: %s", evicted)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._entries),
            )

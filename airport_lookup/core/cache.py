"""In-process lookup cache and hit/miss counters."""
from collections import OrderedDict
from threading import Lock
from typing import Dict, Any, Optional
from airport_lookup.core.models import LookupResult, SOURCE_MEMORY, SOURCE_DB, SOURCE_API, SOURCE_FALLBACK
from airport_lookup.core.config import MEMORY_CACHE_SIZE


class MemoryCache:
    """Capacity-bounded FIFO cache from cache key to LookupResult."""

    def __init__(self, maxsize: int = MEMORY_CACHE_SIZE):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._lock = Lock()
        self._data: "OrderedDict[str, LookupResult]" = OrderedDict()

    def get(self, key: str) -> Optional[LookupResult]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: LookupResult) -> None:
        with self._lock:
            if key in self._data:
                # Overwrite keeps the original insertion position
                self._data[key] = value
                return
            if len(self._data) >= self.maxsize:
                self._data.popitem(last=False)
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data


class LookupStats:
    """Per-tier hit counters plus misses and upstream errors."""

    TIERS = (SOURCE_MEMORY, SOURCE_DB, SOURCE_API, SOURCE_FALLBACK)

    def __init__(self):
        self._lock = Lock()
        self._hits = {tier: 0 for tier in self.TIERS}
        self._misses = 0
        self._errors = 0

    def record_hit(self, tier: str) -> None:
        if tier not in self._hits:
            raise ValueError(f"Unknown tier: {tier}")
        with self._lock:
            self._hits[tier] += 1

    def record_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def record_error(self) -> None:
        with self._lock:
            self._errors += 1

    def reset(self) -> None:
        with self._lock:
            self._hits = {tier: 0 for tier in self.TIERS}
            self._misses = 0
            self._errors = 0

    def snapshot(self, cache_size: int = 0) -> Dict[str, Any]:
        """
        Get a consistent copy of the counters.

        Args:
            cache_size: Current memory cache size to report alongside

        Returns:
            Dictionary with hits, misses, errors, cache_size and hit_rate
        """
        with self._lock:
            hits = dict(self._hits)
            misses = self._misses
            errors = self._errors

        total_hits = sum(hits.values())
        total = total_hits + misses
        rate = (total_hits / total * 100) if total else 0.0

        return {
            "hits": hits,
            "misses": misses,
            "errors": errors,
            "cache_size": cache_size,
            "hit_rate": f"{rate:.2f}%",
        }

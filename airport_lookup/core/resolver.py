"""Airport resolution engine: memory cache, then store, API and static tiers."""
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, List, Dict, Any, Sequence
from airport_lookup.core.cache import MemoryCache, LookupStats
from airport_lookup.core.config import (
    DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT, MAX_BATCH_SIZE, BATCH_WORKERS,
    DB_CACHE_RETENTION_DAYS
)
from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.errors import InvalidInput, NotFound, UpstreamError
from airport_lookup.core.models import LookupResult, LookupOptions, BatchItem, SOURCE_MEMORY
from airport_lookup.core.normalization import normalize_query, get_cache_key
from airport_lookup.core.scoring import select_best_match
from airport_lookup.gazetteers.base import GazetteerProvider
from airport_lookup.gazetteers.store_provider import StoreProvider
from airport_lookup.gazetteers.amadeus import AmadeusProvider
from airport_lookup.gazetteers.static_table import StaticFallbackProvider
from airport_lookup.utils.logging import log_structured, log_error
from airport_lookup.utils.timing import Timer


def _validate_options(prefer_metro, fuzzy, max_results) -> LookupOptions:
    if not isinstance(prefer_metro, bool):
        raise InvalidInput("prefer_metro must be a boolean")
    if not isinstance(fuzzy, bool):
        raise InvalidInput("fuzzy must be a boolean")
    if isinstance(max_results, bool) or not isinstance(max_results, int):
        raise InvalidInput("max_results must be an integer")
    if not 1 <= max_results <= MAX_RESULTS_LIMIT:
        raise InvalidInput(f"max_results must be between 1 and {MAX_RESULTS_LIMIT}")
    return LookupOptions(prefer_metro=prefer_metro, fuzzy=fuzzy, max_results=max_results)


class AirportResolver:
    """Resolves free-text queries to an airport or metro area."""

    def __init__(
        self,
        db_store: Optional[DuckDBStore] = None,
        providers: Optional[List[GazetteerProvider]] = None,
        cache: Optional[MemoryCache] = None,
        stats: Optional[LookupStats] = None
    ):
        """
        Initialize resolver.

        Args:
            db_store: DuckDBStore used by the store tier and for cache persistence
            providers: Ordered tiers to probe (default: store, Amadeus, static)
            cache: Memory cache (default: a new MemoryCache)
            stats: Counters (default: a new LookupStats)
        """
        self.db_store = db_store
        if providers is None:
            providers = []
            if db_store is not None:
                providers.append(StoreProvider(db_store))
            providers.append(AmadeusProvider())
            providers.append(StaticFallbackProvider())
        self.providers = providers
        self.cache = cache if cache is not None else MemoryCache()
        self.stats = stats if stats is not None else LookupStats()

    def lookup(
        self,
        query: str,
        prefer_metro: bool = True,
        fuzzy: bool = True,
        max_results: int = DEFAULT_MAX_RESULTS
    ) -> LookupResult:
        """
        Resolve a query to the best airport or metro area.

        Resolution order:
        1. Memory cache
        2. Persistent store (lookup cache, exact code, fuzzy)
        3. External API (skipped when fuzzy is False)
        4. Static fallback table

        Args:
            query: City name, airport name or IATA code
            prefer_metro: Prefer a metro area over its member airports
            fuzzy: Allow approximate matching
            max_results: Maximum number of alternatives attached

        Returns:
            LookupResult

        Raises:
            InvalidInput: Query or options are malformed
            NotFound: No tier produced a match
        """
        if not isinstance(query, str):
            raise InvalidInput("Query must be a string")
        options = _validate_options(prefer_metro, fuzzy, max_results)

        normalized = normalize_query(query)
        if not normalized:
            raise InvalidInput("Query must not be empty")

        cache_key = get_cache_key(normalized, options.prefer_metro)

        with Timer("airport_lookup", query=normalized) as timer:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.stats.record_hit(SOURCE_MEMORY)
                timer.fields["tier"] = SOURCE_MEMORY
                return cached.with_changes(
                    served_from_memory=True,
                    alternatives=cached.alternatives[:options.max_results]
                )

            for provider in self.providers:
                if provider.source == AmadeusProvider.source and not options.fuzzy:
                    continue

                try:
                    candidates = provider.probe(normalized, options)
                except UpstreamError as e:
                    self.stats.record_error()
                    log_error(e, {"tier": provider.source, "provider": provider.get_name(), "query": normalized})
                    continue

                best = select_best_match(candidates, normalized, options.max_results)
                if best is None:
                    continue

                self.stats.record_hit(provider.source)
                timer.fields["tier"] = provider.source
                if provider.persists_results() and not best.persisted:
                    self._persist(cache_key, best)
                self.cache.put(cache_key, best)
                return best

            self.stats.record_miss()
            timer.fields["tier"] = None
            log_structured("info", "Airport lookup miss", query=query, normalized=normalized)
            raise NotFound(query)

    def _persist(self, cache_key: str, result: LookupResult):
        """Write a resolution to the persistent lookup cache; failures are non-fatal."""
        if self.db_store is None:
            return
        try:
            self.db_store.cache_lookup(cache_key, result)
        except UpstreamError as e:
            self.stats.record_error()
            log_error(e, {"operation": "cache_lookup", "query": cache_key})

    def resolve_airport_code(self, query: str) -> str:
        """Resolve to an IATA code (airport or metro). Raises like lookup."""
        return self.lookup(query).iata_code

    def get_airport_info(self, query: str) -> Optional[Dict[str, Any]]:
        """Basic airport fields, or None when the query cannot be resolved."""
        try:
            result = self.lookup(query, prefer_metro=False)
        except (InvalidInput, NotFound):
            return None
        return {
            "code": result.iata_code,
            "name": result.name,
            "city": result.city,
            "country": result.country,
        }

    def can_resolve(self, query: str) -> bool:
        try:
            self.lookup(query)
        except (InvalidInput, NotFound):
            return False
        return True

    def clear_cache(self):
        """Empty the memory cache. Counters and the persistent cache are kept."""
        self.cache.clear()
        log_structured("info", "Memory lookup cache cleared")

    def clear_db_cache(self, older_than_days: int = DB_CACHE_RETENTION_DAYS) -> int:
        """
        Delete persistent lookup-cache rows not accessed within the window.

        Returns:
            Number of rows deleted (0 when there is no store or it failed)
        """
        if isinstance(older_than_days, bool) or not isinstance(older_than_days, int) or older_than_days < 0:
            raise InvalidInput("older_than_days must be a non-negative integer")
        if self.db_store is None:
            return 0
        try:
            deleted = self.db_store.clear_lookup_cache(older_than_days)
        except UpstreamError as e:
            self.stats.record_error()
            log_error(e, {"operation": "clear_lookup_cache", "older_than_days": older_than_days})
            return 0
        log_structured("info", "Persistent lookup cache pruned", deleted=deleted, older_than_days=older_than_days)
        return deleted

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.snapshot(cache_size=self.cache.size())

    def batch_lookup(
        self,
        queries: Sequence[Any],
        prefer_metro: bool = True,
        fuzzy: bool = True,
        max_results: int = DEFAULT_MAX_RESULTS
    ) -> List[BatchItem]:
        """
        Resolve many queries concurrently.

        One malformed or unresolvable query marks only its own item failed.

        Args:
            queries: Non-empty list of at most MAX_BATCH_SIZE queries
            prefer_metro: Same as lookup
            fuzzy: Same as lookup
            max_results: Same as lookup

        Returns:
            BatchItem per query, in input order
        """
        if not isinstance(queries, (list, tuple)) or not queries:
            raise InvalidInput("queries must be a non-empty list")
        if len(queries) > MAX_BATCH_SIZE:
            raise InvalidInput(f"Maximum {MAX_BATCH_SIZE} queries per batch")
        _validate_options(prefer_metro, fuzzy, max_results)

        def run(query) -> BatchItem:
            try:
                result = self.lookup(query, prefer_metro, fuzzy, max_results)
            except (InvalidInput, NotFound) as e:
                return BatchItem(query=query, success=False, error=str(e))
            return BatchItem(query=query, success=True, result=result)

        with ThreadPoolExecutor(max_workers=min(BATCH_WORKERS, len(queries))) as executor:
            items = list(executor.map(run, queries))

        log_structured("info", "Batch lookup completed", **summarize_batch(items))
        return items


def summarize_batch(items: Sequence[BatchItem]) -> Dict[str, int]:
    """Totals for a batch result."""
    successful = sum(1 for item in items if item.success)
    return {
        "total": len(items),
        "successful": successful,
        "failed": len(items) - successful,
    }

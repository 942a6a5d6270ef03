"""Persistent store tier: lookup cache, exact code match, then fuzzy search."""
from typing import List, Optional
from airport_lookup.core.config import (
    MIN_CONFIDENCE, METRO_BONUS, FUZZY_THRESHOLD, DB_CACHE_MAX_AGE_DAYS
)
from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.models import LookupResult, LookupOptions, METRO, SOURCE_DB
from airport_lookup.core.normalization import is_iata_code, get_cache_key
from airport_lookup.core.scoring import calculate_confidence, boost_confidence
from airport_lookup.gazetteers.base import GazetteerProvider, airport_result, metro_result


class StoreProvider(GazetteerProvider):
    """Resolves queries against airports, metro areas and aliases in DuckDB."""

    source = SOURCE_DB

    def __init__(
        self,
        db_store: DuckDBStore,
        min_confidence: float = MIN_CONFIDENCE,
        metro_bonus: float = METRO_BONUS,
        use_lookup_cache: bool = True
    ):
        """
        Initialize store provider.

        Args:
            db_store: DuckDBStore instance
            min_confidence: Fuzzy candidates below this confidence are dropped
            metro_bonus: Added to a metro surfaced from one of its member airports
            use_lookup_cache: Consult the persistent lookup cache first
        """
        self.db_store = db_store
        self.min_confidence = min_confidence
        self.metro_bonus = metro_bonus
        self.use_lookup_cache = use_lookup_cache

    def get_name(self) -> str:
        return "DuckDB Store"

    def probe(self, query: str, options: LookupOptions) -> List[LookupResult]:
        if self.use_lookup_cache:
            cached = self._from_lookup_cache(query, options)
            if cached:
                return cached

        exact = self._exact_match(query, options)
        if exact:
            return exact

        if not options.fuzzy:
            return []

        return self._fuzzy_match(query, options)

    def _from_lookup_cache(self, query: str, options: LookupOptions) -> List[LookupResult]:
        """
        Re-hydrate a previously persisted resolution with its alternatives.

        Entities are re-read from the store at their stored confidence; an
        alternative whose entity is gone is skipped. Results are flagged
        ``persisted`` so the resolver does not write them back.
        """
        row = self.db_store.get_cached_lookup(
            get_cache_key(query, options.prefer_metro),
            max_age_days=DB_CACHE_MAX_AGE_DAYS
        )
        if not row or (row["confidence"] or 0.0) < self.min_confidence:
            return []

        best = self._rehydrate(row["result_type"], row["result_iata"], row["confidence"])
        if best is None:
            return []

        results = [best]
        for alt in row.get("alternatives") or []:
            if not isinstance(alt, dict):
                continue
            result = self._rehydrate(alt.get("type"), alt.get("iata_code"), alt.get("confidence"))
            if result is not None:
                results.append(result)
        return results

    def _rehydrate(self, result_type, code, confidence) -> Optional[LookupResult]:
        if not code:
            return None
        try:
            confidence = max(0.0, min(1.0, float(confidence or 0.0)))
        except (TypeError, ValueError):
            return None

        if result_type == METRO:
            metro = self.db_store.find_metro_by_iata(code)
            if metro and metro.airport_codes:
                return metro_result(metro, confidence, self.source).with_changes(persisted=True)
            return None

        airport = self.db_store.find_airport_by_iata(code)
        if airport:
            return airport_result(airport, confidence, self.source).with_changes(persisted=True)
        return None

    def _exact_match(self, query: str, options: LookupOptions) -> List[LookupResult]:
        """
        Probe metro and airport tables by IATA code.

        The typed code is authoritative and scores 1.0. When a metro and an
        airport share the code, the metro wins with prefer_metro and the
        airport wins otherwise. With prefer_metro, the metro of an exactly
        matched airport is offered just below it, as an alternative.
        """
        if not is_iata_code(query):
            return []

        code = query.upper()
        metro = self.db_store.find_metro_by_iata(code)
        if metro and not metro.airport_codes:
            metro = None

        if options.prefer_metro and metro:
            return [metro_result(metro, 1.0, self.source)]

        airport = self.db_store.find_airport_by_iata(code)
        if airport:
            results = [airport_result(airport, 1.0, self.source)]
            if options.prefer_metro:
                parent = self.db_store.find_metro_for_airport(airport.iata_code)
                if parent and parent.airport_codes and parent.iata_code != airport.iata_code:
                    results.append(metro_result(parent, 1.0 - self.metro_bonus, self.source))
            return results

        if metro:
            return [metro_result(metro, 1.0, self.source)]

        return []

    def _fuzzy_match(self, query: str, options: LookupOptions) -> List[LookupResult]:
        """Similarity search over metro names, airport names/cities and aliases."""
        candidates = {}

        def add(candidate: LookupResult):
            key = (candidate.type, candidate.iata_code)
            if key not in candidates or candidates[key].confidence < candidate.confidence:
                candidates[key] = candidate

        if options.prefer_metro:
            for match in self.db_store.search_metros(query, FUZZY_THRESHOLD, options.max_results):
                confidence = calculate_confidence(match["score"])
                if confidence >= self.min_confidence:
                    add(metro_result(match["metro"], confidence, self.source))

        for match in self.db_store.search_airports(query, FUZZY_THRESHOLD, options.max_results):
            confidence = calculate_confidence(match["score"])
            if confidence < self.min_confidence:
                continue
            airport = match["airport"]
            add(airport_result(airport, confidence, self.source))

            if options.prefer_metro:
                parent = self.db_store.find_metro_for_airport(airport.iata_code)
                if parent and parent.airport_codes:
                    add(metro_result(
                        parent,
                        boost_confidence(confidence, self.metro_bonus),
                        self.source
                    ))

        return list(candidates.values())

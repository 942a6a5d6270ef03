"""Tests for the airport resolver."""
import pytest
from airport_lookup.core.cache import MemoryCache, LookupStats
from airport_lookup.core.errors import InvalidInput, NotFound, UpstreamError
from airport_lookup.core.models import LookupResult, AIRPORT, METRO
from airport_lookup.core.resolver import AirportResolver, summarize_batch
from airport_lookup.gazetteers.base import GazetteerProvider
from airport_lookup.gazetteers.static_table import StaticFallbackProvider


class FailingProvider(GazetteerProvider):
    """Tier whose backing service is down."""

    source = "db"

    def probe(self, query, options):
        raise UpstreamError(self.source, "connection refused")

    def get_name(self):
        return "Failing"


class RecordingApiProvider(GazetteerProvider):
    """API tier that records its calls and answers for one code."""

    source = "api"

    def __init__(self):
        self.calls = []

    def probe(self, query, options):
        self.calls.append(query)
        if query == "xyz":
            return [LookupResult(type=AIRPORT, iata_code="XYZ", name="Xyz Field", confidence=0.7, source="api")]
        return []

    def get_name(self):
        return "Recording API"


def test_exact_code_then_memory(resolver):
    first = resolver.lookup("JFK")
    assert first.iata_code == "JFK"
    assert first.type == AIRPORT
    assert first.confidence == 1.0
    assert first.source == "db"
    assert first.served_from_memory is False

    second = resolver.lookup("jfk")
    assert second.iata_code == "JFK"
    assert second.served_from_memory is True
    assert second.source == "db"

    stats = resolver.get_stats()
    assert stats["hits"]["db"] == 1
    assert stats["hits"]["memory"] == 1
    assert stats["cache_size"] == 1


def test_city_resolves_to_metro(resolver):
    result = resolver.lookup("Toronto")
    assert result.type == METRO
    assert result.iata_code == "YTO"
    assert result.airport_codes[0] == "YYZ"

    airport = resolver.lookup("Toronto", prefer_metro=False)
    assert airport.type == AIRPORT
    assert airport.iata_code in ("YYZ", "YTZ")
    assert airport.served_from_memory is False


def test_noise_words_share_cache_entry(resolver):
    resolver.lookup("London")
    result = resolver.lookup("  the London Airport ")
    assert result.served_from_memory is True
    assert result.iata_code == "LON"


@pytest.mark.parametrize("query", ["", "   ", "\t\n", None, 123, ["JFK"]])
def test_invalid_query(resolver, query):
    with pytest.raises(InvalidInput):
        resolver.lookup(query)


@pytest.mark.parametrize("options", [
    {"prefer_metro": "yes"},
    {"fuzzy": 1},
    {"max_results": 0},
    {"max_results": 51},
    {"max_results": True},
    {"max_results": 2.5},
])
def test_invalid_options(resolver, options):
    with pytest.raises(InvalidInput):
        resolver.lookup("JFK", **options)


def test_not_found(resolver):
    with pytest.raises(NotFound) as exc_info:
        resolver.lookup("Qqqqqqqq Qqqq")
    assert "Qqqqqqqq Qqqq" in str(exc_info.value)
    assert exc_info.value.query == "Qqqqqqqq Qqqq"

    stats = resolver.get_stats()
    assert stats["misses"] == 1
    assert stats["hit_rate"] == "0.00%"


def test_hit_rate(resolver):
    resolver.lookup("JFK")
    with pytest.raises(NotFound):
        resolver.lookup("qqqqqqqq", fuzzy=False)
    assert resolver.get_stats()["hit_rate"] == "50.00%"


def test_fallback_tier(resolver, populated_db):
    result = resolver.lookup("vegas", fuzzy=False)
    assert result.iata_code == "LAS"
    assert result.source == "fallback"
    assert resolver.get_stats()["hits"]["fallback"] == 1
    # Fallback resolutions stay out of the persistent lookup cache
    assert populated_db.get_stats()["airport_lookup_cache"] == 0


def test_store_resolutions_are_persisted(resolver, populated_db):
    resolver.lookup("JFK")
    row = populated_db.get_cached_lookup("jfk:metro")
    assert row["result_iata"] == "JFK"
    assert row["source"] == "db"


def test_persistent_cache_survives_memory_clear(resolver):
    resolver.lookup("Toronto")
    resolver.clear_cache()
    assert resolver.get_stats()["cache_size"] == 0

    result = resolver.lookup("Toronto")
    assert result.served_from_memory is False
    assert result.iata_code == "YTO"
    assert resolver.get_stats()["hits"]["db"] == 2


def test_upstream_error_falls_through():
    resolver = AirportResolver(providers=[FailingProvider(), StaticFallbackProvider()])
    result = resolver.lookup("Toronto")
    assert result.iata_code == "YTO"
    assert result.source == "fallback"

    stats = resolver.get_stats()
    assert stats["errors"] == 1
    assert stats["hits"]["fallback"] == 1


def test_api_tier_skipped_without_fuzzy():
    api = RecordingApiProvider()
    resolver = AirportResolver(providers=[api, StaticFallbackProvider()])

    with pytest.raises(NotFound):
        resolver.lookup("xyz", fuzzy=False)
    assert api.calls == []

    result = resolver.lookup("xyz")
    assert api.calls == ["xyz"]
    assert result.source == "api"
    assert resolver.get_stats()["hits"]["api"] == 1


def test_narrow_operations(resolver):
    assert resolver.resolve_airport_code("new york") == "NYC"
    assert resolver.can_resolve("Toronto") is True
    assert resolver.can_resolve("qqqqqqqq") is False
    assert resolver.can_resolve("") is False

    info = resolver.get_airport_info("Toronto")
    assert set(info) == {"code", "name", "city", "country"}
    assert info["code"] in ("YYZ", "YTZ")
    assert resolver.get_airport_info("qqqqqqqq") is None
    assert resolver.get_airport_info(None) is None

    with pytest.raises(NotFound):
        resolver.resolve_airport_code("qqqqqqqq")


def test_clear_db_cache(resolver, populated_db):
    resolver.lookup("JFK")
    assert resolver.clear_db_cache(30) == 0
    assert resolver.clear_db_cache() == 0

    with pytest.raises(InvalidInput):
        resolver.clear_db_cache(-1)
    with pytest.raises(InvalidInput):
        resolver.clear_db_cache("30")


def test_clear_db_cache_store_failure(tmp_path):
    from airport_lookup.core.duckdb_store import DuckDBStore
    store = DuckDBStore(tmp_path / "broken.duckdb")
    resolver = AirportResolver(store, providers=[StaticFallbackProvider()])
    store.close()

    assert resolver.clear_db_cache(30) == 0
    assert resolver.get_stats()["errors"] == 1


def test_batch_lookup(resolver):
    items = resolver.batch_lookup(["JFK", 123, "Toronto", "qqqqqqqq"])

    assert [item.query for item in items] == ["JFK", 123, "Toronto", "qqqqqqqq"]
    assert [item.success for item in items] == [True, False, True, False]
    assert items[0].result.iata_code == "JFK"
    assert items[1].error
    assert items[1].result is None
    assert items[2].result.iata_code == "YTO"

    assert summarize_batch(items) == {"total": 4, "successful": 2, "failed": 2}
    assert items[0].to_dict()["result"]["iata_code"] == "JFK"


def test_batch_lookup_limits(resolver):
    with pytest.raises(InvalidInput):
        resolver.batch_lookup([])
    with pytest.raises(InvalidInput):
        resolver.batch_lookup("JFK")
    with pytest.raises(InvalidInput):
        resolver.batch_lookup(["JFK"] * 51)
    with pytest.raises(InvalidInput):
        resolver.batch_lookup(["JFK"], max_results=0)


def test_alternatives_attached(resolver):
    result = resolver.lookup("JFK")
    assert [alt.iata_code for alt in result.alternatives] == ["NYC"]
    assert result.to_dict()["alternatives"][0]["type"] == "metro"


def test_default_tiers_without_store():
    resolver = AirportResolver()
    assert [p.source for p in resolver.providers] == ["api", "fallback"]
    assert isinstance(resolver.cache, MemoryCache)
    assert isinstance(resolver.stats, LookupStats)


def test_alternatives_survive_memory_clear(resolver, populated_db):
    assert [alt.iata_code for alt in resolver.lookup("JFK").alternatives] == ["NYC"]
    resolver.clear_cache()

    result = resolver.lookup("JFK")
    assert result.served_from_memory is False
    assert result.iata_code == "JFK"
    assert [alt.iata_code for alt in result.alternatives] == ["NYC"]
    assert result.alternatives[0].confidence == pytest.approx(0.95)

    # Written once, read back once, then read here; never rewritten
    row = populated_db.get_cached_lookup("jfk:metro")
    assert [alt["iata_code"] for alt in row["alternatives"]] == ["NYC"]
    assert row["hit_count"] == 3


def test_memory_hit_respects_max_results(resolver):
    alternatives = tuple(
        LookupResult(type=AIRPORT, iata_code=code, name=f"{code} Airport", confidence=0.9)
        for code in ("AAA", "BBB", "CCC")
    )
    resolver.cache.put("xyz:metro", LookupResult(
        type=AIRPORT, iata_code="XYZ", name="Xyz Field", confidence=0.92, alternatives=alternatives,
    ))

    result = resolver.lookup("xyz", max_results=1)
    assert result.served_from_memory is True
    assert [alt.iata_code for alt in result.alternatives] == ["AAA"]
    assert len(resolver.lookup("xyz").alternatives) == 3

"""Pytest configuration and fixtures."""
import pytest
import tempfile
import shutil
from pathlib import Path
import pandas as pd
from airport_lookup.core.cache import MemoryCache, LookupStats
from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.resolver import AirportResolver
from airport_lookup.core.seed import seed_store
from airport_lookup.gazetteers.store_provider import StoreProvider
from airport_lookup.gazetteers.static_table import StaticFallbackProvider


@pytest.fixture
def temp_db():
    """Create temporary DuckDB database."""
    temp_dir = tempfile.mkdtemp()
    db_path = Path(temp_dir) / "test.duckdb"
    db_store = DuckDBStore(db_path)
    yield db_store
    db_store.close()
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_airports():
    """Rows shaped like the OurAirports airports.csv export."""
    rows = [
        ("KJFK", "large_airport", "John F Kennedy International Airport", "40.6398", "-73.7789", "US", "New York", "JFK"),
        ("KLGA", "large_airport", "La Guardia Airport", "40.7772", "-73.8726", "US", "New York", "LGA"),
        ("KEWR", "large_airport", "Newark Liberty International Airport", "40.6925", "-74.1687", "US", "Newark", "EWR"),
        ("EGLL", "large_airport", "London Heathrow Airport", "51.4706", "-0.4619", "GB", "London", "LHR"),
        ("EGKK", "large_airport", "London Gatwick Airport", "51.1481", "-0.1903", "GB", "London", "LGW"),
        ("CYYZ", "large_airport", "Toronto Pearson International Airport", "43.6772", "-79.6306", "CA", "Toronto", "YYZ"),
        ("CYTZ", "medium_airport", "Billy Bishop Toronto City Centre Airport", "43.6275", "-79.3962", "CA", "Toronto", "YTZ"),
        ("EDDB", "large_airport", "Berlin Brandenburg Airport", "52.3514", "13.4939", "DE", "Berlin", "BER"),
        ("KLAX", "large_airport", "Los Angeles International Airport", "33.9425", "-118.408", "US", "Los Angeles", "LAX"),
        ("K0S9", "small_airport", "Jefferson County International Airport", "48.0538", "-122.811", "US", "Port Townsend", "JCY"),
        ("EGLW", "heliport", "London Heliport", "51.4697", "-0.1797", "GB", "London", ""),
    ]
    columns = ["ident", "type", "name", "latitude_deg", "longitude_deg", "iso_country", "municipality", "iata_code"]
    return pd.DataFrame(rows, columns=columns)


@pytest.fixture
def seedable_airports(sample_airports):
    """Sample rows already filtered the way load_ourairports filters."""
    df = sample_airports[sample_airports["type"].isin(["large_airport", "medium_airport"])]
    return df.reset_index(drop=True)


@pytest.fixture
def populated_db(temp_db, seedable_airports):
    """Create database with sample airports, metro areas and aliases."""
    seed_store(temp_db, seedable_airports)
    return temp_db


@pytest.fixture
def resolver(populated_db):
    """Resolver over the sample store with the static fallback, no external API."""
    return AirportResolver(
        populated_db,
        providers=[StoreProvider(populated_db), StaticFallbackProvider()],
        cache=MemoryCache(),
        stats=LookupStats(),
    )

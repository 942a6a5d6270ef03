#!/usr/bin/env python3
"""CLI script to seed the airport store from OurAirports.com data."""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.config import DUCKDB_PATH, OURAIRPORTS_URL, LOG_LEVEL
from airport_lookup.core.seed import load_ourairports, seed_store
from airport_lookup.utils.logging import setup_logging
from airport_lookup.utils.error_tracking import setup_error_tracking


def main():
    parser = argparse.ArgumentParser(description="Seed airports, metro areas and aliases")
    parser.add_argument("--db-path", type=Path, default=DUCKDB_PATH,
                       help="DuckDB database path")
    parser.add_argument("--source", default=OURAIRPORTS_URL,
                       help="airports.csv path or URL")

    args = parser.parse_args()

    setup_logging(LOG_LEVEL)
    setup_error_tracking()

    print(f"Reading airports from {args.source}...")
    df = load_ourairports(args.source)
    print(f"Filtered to {len(df)} large/medium airports with IATA codes")

    db_store = DuckDBStore(args.db_path)
    try:
        counts = seed_store(db_store, df, progress=True)
    finally:
        db_store.close()

    print(f"✅ Seeded {counts['airports']} airports, {counts['metro_areas']} metro areas, "
          f"{counts['associations']} associations, {counts['aliases']} aliases")


if __name__ == "__main__":
    main()

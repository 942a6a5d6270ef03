#!/usr/bin/env python3
"""CLI script to resolve airport queries against the store."""
import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.config import DUCKDB_PATH, DEFAULT_MAX_RESULTS, LOG_LEVEL, DB_CACHE_RETENTION_DAYS
from airport_lookup.core.errors import AirportLookupError
from airport_lookup.core.resolver import AirportResolver, summarize_batch
from airport_lookup.utils.logging import setup_logging
from airport_lookup.utils.error_tracking import setup_error_tracking


def main():
    parser = argparse.ArgumentParser(description="Resolve city names or IATA codes to airports")
    parser.add_argument("queries", nargs="*", help="Queries to resolve")
    parser.add_argument("--db-path", type=Path, default=DUCKDB_PATH,
                       help="DuckDB database path")
    parser.add_argument("--airport", action="store_true",
                       help="Prefer individual airports over metro areas")
    parser.add_argument("--exact", action="store_true",
                       help="Disable fuzzy matching and the API tier")
    parser.add_argument("--max-results", type=int, default=DEFAULT_MAX_RESULTS,
                       help="Maximum alternatives per result")
    parser.add_argument("--clear-db-cache", type=int, nargs="?", const=DB_CACHE_RETENTION_DAYS,
                       metavar="DAYS", help="Prune lookup-cache rows older than DAYS and exit")
    parser.add_argument("--stats", action="store_true",
                       help="Print lookup statistics after resolving")

    args = parser.parse_args()

    setup_logging(LOG_LEVEL)
    setup_error_tracking()

    db_store = DuckDBStore(args.db_path)
    resolver = AirportResolver(db_store)

    try:
        if args.clear_db_cache is not None:
            deleted = resolver.clear_db_cache(args.clear_db_cache)
            print(f"✅ Deleted {deleted} cached lookups")
            return 0

        if not args.queries:
            parser.error("at least one query is required")

        try:
            items = resolver.batch_lookup(
                args.queries,
                prefer_metro=not args.airport,
                fuzzy=not args.exact,
                max_results=args.max_results
            )
        except AirportLookupError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 2

        output = {
            "results": [item.to_dict() for item in items],
            **summarize_batch(items),
        }
        if args.stats:
            output["stats"] = resolver.get_stats()
        print(json.dumps(output, indent=2, ensure_ascii=False))
        return 0 if output["failed"] == 0 else 1
    finally:
        db_store.close()


if __name__ == "__main__":
    sys.exit(main())

"""DuckDB storage layer for airport, metro area and alias records."""
import duckdb
import json
from contextlib import contextmanager
from pathlib import Path
from typing import List, Dict, Optional, Any, Iterable
from datetime import datetime, timedelta
from airport_lookup.core.config import DUCKDB_PATH, FUZZY_THRESHOLD
from airport_lookup.core.errors import UpstreamError
from airport_lookup.core.fuzzy import fuzzy_match
from airport_lookup.core.models import Airport, MetroArea, AirportAlias, LookupResult
from airport_lookup.core.normalization import normalize_query


AIRPORT_COLUMNS = """
    iata_code, icao_code, name, city, country, country_code,
    latitude, longitude, timezone, airport_type, is_active, passenger_count
"""


class DuckDBStore:
    """DuckDB storage manager for airport lookup data."""

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize DuckDB connection.

        Args:
            db_path: Path to DuckDB database file (":memory:" for a scratch store)
        """
        self.db_path = db_path or DUCKDB_PATH
        if str(self.db_path) != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = duckdb.connect(str(self.db_path))
        except duckdb.Error as e:
            raise UpstreamError("db", f"Cannot open {self.db_path}: {e}", e) from e
        self._init_schema()

    @contextmanager
    def _cursor(self):
        """Per-call cursor; DuckDB connections are not shared across threads."""
        cursor = None
        try:
            cursor = self.conn.cursor()
            yield cursor
        except duckdb.Error as e:
            raise UpstreamError("db", str(e), e) from e
        finally:
            if cursor is not None:
                cursor.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self._cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS airports (
                    iata_code VARCHAR PRIMARY KEY,
                    icao_code VARCHAR,
                    name VARCHAR NOT NULL,
                    city VARCHAR NOT NULL,
                    country VARCHAR NOT NULL,
                    country_code VARCHAR,
                    latitude DOUBLE,
                    longitude DOUBLE,
                    timezone VARCHAR,
                    airport_type VARCHAR,
                    is_active BOOLEAN DEFAULT true,
                    passenger_count BIGINT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS metro_areas (
                    iata_code VARCHAR PRIMARY KEY,
                    name VARCHAR NOT NULL,
                    country VARCHAR NOT NULL,
                    country_code VARCHAR,
                    latitude DOUBLE,
                    longitude DOUBLE,
                    timezone VARCHAR,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Member order: primary first, then position
            cur.execute("""
                CREATE TABLE IF NOT EXISTS airport_metro_associations (
                    airport_code VARCHAR,
                    metro_code VARCHAR,
                    is_primary BOOLEAN DEFAULT false,
                    position INTEGER DEFAULT 0,
                    PRIMARY KEY (airport_code, metro_code)
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS airport_aliases (
                    airport_code VARCHAR,
                    alias VARCHAR,
                    alias_type VARCHAR,
                    match_weight DOUBLE DEFAULT 1.0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (airport_code, alias)
                )
            """)

            # Lookup cache
            cur.execute("""
                CREATE TABLE IF NOT EXISTS airport_lookup_cache (
                    query VARCHAR PRIMARY KEY,
                    result_type VARCHAR NOT NULL,
                    result_iata VARCHAR NOT NULL,
                    alternatives TEXT,
                    confidence DOUBLE,
                    source VARCHAR,
                    hit_count INTEGER DEFAULT 1,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    last_accessed TIMESTAMP
                )
            """)

            cur.execute("CREATE INDEX IF NOT EXISTS idx_assoc_metro ON airport_metro_associations(metro_code)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_cache_accessed ON airport_lookup_cache(last_accessed)")

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def upsert_airports(self, airports: Iterable[Airport]) -> int:
        """
        Insert or replace airport rows.

        Args:
            airports: Airports to write

        Returns:
            Number of rows written
        """
        rows = [
            (
                a.iata_code.upper(),
                a.icao_code,
                a.name,
                a.city,
                a.country,
                a.country_code,
                a.latitude,
                a.longitude,
                a.timezone,
                a.airport_type,
                a.is_active,
                a.passenger_count,
                datetime.now()
            )
            for a in airports
        ]
        if not rows:
            return 0

        with self._cursor() as cur:
            cur.executemany(
                f"""
                INSERT OR REPLACE INTO airports ({AIRPORT_COLUMNS}, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows
            )
        return len(rows)

    def upsert_metro_area(self, metro: MetroArea) -> int:
        """
        Insert or replace a metro area and its member associations.

        Args:
            metro: Metro area; ``airport_codes[0]`` is the primary member

        Returns:
            Number of member associations written
        """
        code = metro.iata_code.upper()
        with self._cursor() as cur:
            cur.execute("""
                INSERT OR REPLACE INTO metro_areas
                (iata_code, name, country, country_code, latitude, longitude, timezone, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                code,
                metro.name,
                metro.country,
                metro.country_code,
                metro.latitude,
                metro.longitude,
                metro.timezone,
                datetime.now()
            ])

            cur.execute("DELETE FROM airport_metro_associations WHERE metro_code = ?", [code])
            rows = [
                (airport_code.upper(), code, position == 0, position)
                for position, airport_code in enumerate(metro.airport_codes)
            ]
            if rows:
                cur.executemany("""
                    INSERT OR REPLACE INTO airport_metro_associations
                    (airport_code, metro_code, is_primary, position)
                    VALUES (?, ?, ?, ?)
                """, rows)
        return len(rows)

    def upsert_aliases(self, aliases: Iterable[AirportAlias]) -> int:
        """Insert or replace airport aliases."""
        rows = [
            (a.airport_code.upper(), a.alias, a.alias_type, a.match_weight, datetime.now())
            for a in aliases
            if a.alias
        ]
        if not rows:
            return 0

        with self._cursor() as cur:
            cur.executemany("""
                INSERT OR REPLACE INTO airport_aliases
                (airport_code, alias, alias_type, match_weight, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, rows)
        return len(rows)

    # ------------------------------------------------------------------
    # Exact lookups
    # ------------------------------------------------------------------

    def find_airport_by_iata(self, iata_code: str) -> Optional[Airport]:
        """Get an active airport by IATA code."""
        with self._cursor() as cur:
            row = cur.execute(f"""
                SELECT {AIRPORT_COLUMNS}
                FROM airports
                WHERE iata_code = UPPER(?)
                  AND is_active = true
            """, [iata_code]).fetchone()

        return self._row_to_airport(row) if row else None

    def find_metro_by_iata(self, iata_code: str) -> Optional[MetroArea]:
        """Get a metro area (with its member airport codes) by IATA code."""
        with self._cursor() as cur:
            row = cur.execute("""
                SELECT iata_code, name, country, country_code, latitude, longitude, timezone
                FROM metro_areas
                WHERE iata_code = UPPER(?)
            """, [iata_code]).fetchone()
            if not row:
                return None
            members = self._member_codes(cur, row[0])

        return self._row_to_metro(row, members)

    def find_metro_for_airport(self, airport_code: str) -> Optional[MetroArea]:
        """Get the metro area an airport belongs to, if any."""
        with self._cursor() as cur:
            row = cur.execute("""
                SELECT m.iata_code, m.name, m.country, m.country_code,
                       m.latitude, m.longitude, m.timezone
                FROM metro_areas m
                JOIN airport_metro_associations ama ON m.iata_code = ama.metro_code
                WHERE ama.airport_code = UPPER(?)
                ORDER BY ama.is_primary DESC, m.iata_code
                LIMIT 1
            """, [airport_code]).fetchone()
            if not row:
                return None
            members = self._member_codes(cur, row[0])

        return self._row_to_metro(row, members)

    def _member_codes(self, cur, metro_code: str) -> List[str]:
        rows = cur.execute("""
            SELECT ama.airport_code
            FROM airport_metro_associations ama
            WHERE ama.metro_code = ?
            ORDER BY ama.is_primary DESC, ama.position, ama.airport_code
        """, [metro_code]).fetchall()
        return [r[0] for r in rows]

    # ------------------------------------------------------------------
    # Fuzzy search
    # ------------------------------------------------------------------

    def search_airports(
        self,
        query: str,
        threshold: float = FUZZY_THRESHOLD,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """
        Search active airports by name, city and alias with fuzzy matching.

        Alias scores are scaled by the alias match weight. Each airport
        appears once, with its best score.

        Args:
            query: Normalized query string
            threshold: Minimum similarity score
            limit: Maximum results

        Returns:
            List of {"airport", "score", "matched_text"} sorted by score
        """
        with self._cursor() as cur:
            airport_rows = cur.execute(f"""
                SELECT {AIRPORT_COLUMNS}
                FROM airports
                WHERE is_active = true
            """).fetchall()
            alias_rows = cur.execute("""
                SELECT al.airport_code, al.alias, al.match_weight
                FROM airport_aliases al
                JOIN airports a ON a.iata_code = al.airport_code
                WHERE a.is_active = true
            """).fetchall()

        airports = {row[0]: self._row_to_airport(row) for row in airport_rows}

        # Searchable strings with (airport_code, weight) per index
        search_strings = []
        owners = []
        for code, airport in airports.items():
            for text in (airport.name, airport.city):
                if text:
                    search_strings.append(normalize_query(text))
                    owners.append((code, 1.0))
        for airport_code, alias, weight in alias_rows:
            search_strings.append(normalize_query(alias))
            owners.append((airport_code, weight if weight is not None else 1.0))

        matches = fuzzy_match(query, search_strings, threshold, limit=None)

        best: Dict[str, Dict[str, Any]] = {}
        for matched_text, score, idx in matches:
            code, weight = owners[idx]
            weighted = score * weight
            if weighted < threshold:
                continue
            if code not in best or best[code]["score"] < weighted:
                best[code] = {
                    "airport": airports[code],
                    "score": weighted,
                    "matched_text": matched_text,
                }

        results = sorted(
            best.values(),
            key=lambda x: (x["score"], x["airport"].passenger_count or 0),
            reverse=True
        )
        return results[:limit]

    def search_metros(
        self,
        query: str,
        threshold: float = FUZZY_THRESHOLD,
        limit: int = 10
    ) -> List[Dict[str, Any]]:
        """
        Search metro areas by name with fuzzy matching.

        Args:
            query: Normalized query string
            threshold: Minimum similarity score
            limit: Maximum results

        Returns:
            List of {"metro", "score", "matched_text"} sorted by score
        """
        with self._cursor() as cur:
            rows = cur.execute("""
                SELECT iata_code, name, country, country_code, latitude, longitude, timezone
                FROM metro_areas
            """).fetchall()
            metros = [self._row_to_metro(row, self._member_codes(cur, row[0])) for row in rows]

        # Metro areas without member airports cannot be returned
        metros = [m for m in metros if m.airport_codes]
        search_strings = [normalize_query(m.name) for m in metros]
        matches = fuzzy_match(query, search_strings, threshold, limit=limit)

        return [
            {"metro": metros[idx], "score": score, "matched_text": matched_text}
            for matched_text, score, idx in matches
        ]

    # ------------------------------------------------------------------
    # Lookup cache
    # ------------------------------------------------------------------

    def get_cached_lookup(self, query: str, max_age_days: int = 7) -> Optional[Dict[str, Any]]:
        """
        Get a recent cached resolution and bump its hit count.

        Args:
            query: Cache key (normalized query + preference tag)
            max_age_days: Ignore rows not accessed within this many days

        Returns:
            Cached row as dictionary, or None
        """
        cutoff = datetime.now() - timedelta(days=max_age_days)
        with self._cursor() as cur:
            row = cur.execute("""
                SELECT result_type, result_iata, alternatives, confidence, source, hit_count
                FROM airport_lookup_cache
                WHERE query = ?
                  AND last_accessed > ?
            """, [query, cutoff]).fetchone()
            if not row:
                return None

            cur.execute("""
                UPDATE airport_lookup_cache
                SET hit_count = hit_count + 1,
                    last_accessed = ?
                WHERE query = ?
            """, [datetime.now(), query])

        return {
            "result_type": row[0],
            "result_iata": row[1],
            "alternatives": json.loads(row[2]) if row[2] else [],
            "confidence": row[3],
            "source": row[4],
            "hit_count": row[5] + 1,
        }

    def cache_lookup(self, query: str, result: LookupResult):
        """Persist a resolution into the lookup cache, stamped with now."""
        now = datetime.now()
        alternatives = json.dumps([
            {"type": alt.type, "iata_code": alt.iata_code, "confidence": alt.confidence}
            for alt in result.alternatives
        ])
        with self._cursor() as cur:
            # Existing rows keep their hit count and creation time
            cur.execute("""
                INSERT OR REPLACE INTO airport_lookup_cache
                (query, result_type, result_iata, alternatives, confidence, source,
                 hit_count, created_at, last_accessed)
                SELECT ?, ?, ?, ?, ?, ?,
                       COALESCE((SELECT hit_count FROM airport_lookup_cache WHERE query = ?), 0) + 1,
                       COALESCE((SELECT created_at FROM airport_lookup_cache WHERE query = ?), ?),
                       ?
            """, [
                query,
                result.type,
                result.iata_code,
                alternatives,
                result.confidence,
                result.source,
                query,
                query,
                now,
                now
            ])

    def clear_lookup_cache(self, older_than_days: int = 30) -> int:
        """
        Delete lookup cache rows not accessed within the given number of days.

        Returns:
            Number of rows removed
        """
        cutoff = datetime.now() - timedelta(days=older_than_days)
        with self._cursor() as cur:
            removed = cur.execute("""
                DELETE FROM airport_lookup_cache
                WHERE last_accessed < ?
                RETURNING query
            """, [cutoff]).fetchall()
        return len(removed)

    def get_stats(self) -> Dict[str, Any]:
        """Get row counts for every table."""
        with self._cursor() as cur:
            counts = {
                table: cur.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in (
                    "airports",
                    "metro_areas",
                    "airport_metro_associations",
                    "airport_aliases",
                    "airport_lookup_cache",
                )
            }
        return counts

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_airport(row) -> Airport:
        return Airport(
            iata_code=row[0],
            icao_code=row[1],
            name=row[2],
            city=row[3],
            country=row[4],
            country_code=row[5],
            latitude=row[6],
            longitude=row[7],
            timezone=row[8],
            airport_type=row[9],
            is_active=bool(row[10]),
            passenger_count=row[11],
        )

    @staticmethod
    def _row_to_metro(row, members: List[str]) -> MetroArea:
        return MetroArea(
            iata_code=row[0],
            name=row[1],
            country=row[2],
            country_code=row[3],
            latitude=row[4],
            longitude=row[5],
            timezone=row[6],
            airport_codes=members,
        )

    def close(self):
        """Close database connection."""
        self.conn.close()

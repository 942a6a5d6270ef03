"""Data models for airport lookups."""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Any, Tuple


AIRPORT = "airport"
METRO = "metro"

SOURCE_MEMORY = "memory"
SOURCE_DB = "db"
SOURCE_API = "api"
SOURCE_FALLBACK = "fallback"
SOURCES = (SOURCE_MEMORY, SOURCE_DB, SOURCE_API, SOURCE_FALLBACK)


@dataclass
class Airport:
    """A single airport row as seeded into the store."""
    iata_code: str
    name: str
    city: str
    country: str
    country_code: Optional[str] = None
    icao_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    airport_type: Optional[str] = None  # large, medium, small
    is_active: bool = True
    passenger_count: Optional[int] = None


@dataclass
class MetroArea:
    """Multi-airport grouping with its own city code (e.g. NYC, LON)."""
    iata_code: str
    name: str
    country: str
    country_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    airport_codes: List[str] = field(default_factory=list)  # primary first

    @property
    def primary_airport(self) -> Optional[str]:
        return self.airport_codes[0] if self.airport_codes else None


@dataclass
class AirportAlias:
    """Alternative name for an airport, used only for fuzzy matching."""
    airport_code: str
    alias: str
    alias_type: str = "common_name"
    match_weight: float = 1.0


@dataclass(frozen=True)
class LookupResult:
    """Resolved airport or metro area.

    ``source`` is the tier that originally produced the match.
    ``served_from_memory`` is set when the result came out of the
    in-process cache instead. ``persisted`` marks a result read back from
    the persistent lookup cache, so it is not written again.
    """
    type: str
    iata_code: str
    name: str
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    airport_codes: Tuple[str, ...] = ()
    icao_code: Optional[str] = None
    airport_type: Optional[str] = None
    passenger_count: Optional[int] = None
    confidence: float = 0.0
    alternatives: Tuple["LookupResult", ...] = ()
    source: str = SOURCE_DB
    served_from_memory: bool = False
    persisted: bool = False

    def __post_init__(self):
        if self.type not in (AIRPORT, METRO):
            raise ValueError(f"Unknown result type: {self.type}")
        if self.source not in SOURCES:
            raise ValueError(f"Unknown source tier: {self.source}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")
        if self.type == METRO and not self.airport_codes:
            raise ValueError(f"Metro {self.iata_code} has no member airports")

    @property
    def is_metro(self) -> bool:
        return self.type == METRO

    def with_changes(self, **changes) -> "LookupResult":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "type": self.type,
            "iata_code": self.iata_code,
            "name": self.name,
            "city": self.city,
            "country": self.country,
            "country_code": self.country_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "confidence": self.confidence,
            "source": self.source,
            "served_from_memory": self.served_from_memory,
        }
        if self.is_metro:
            data["airport_codes"] = list(self.airport_codes)
        else:
            data["icao_code"] = self.icao_code
            data["airport_type"] = self.airport_type
            data["passenger_count"] = self.passenger_count
        if self.alternatives:
            data["alternatives"] = [alt.to_dict() for alt in self.alternatives]
        return data


@dataclass(frozen=True)
class LookupOptions:
    """Caller options for a lookup."""
    prefer_metro: bool = True
    fuzzy: bool = True
    max_results: int = 5


@dataclass
class BatchItem:
    """Per-query outcome of a batch lookup."""
    query: Any
    success: bool
    result: Optional[LookupResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }

"""Base class for airport gazetteer tiers."""
from abc import ABC, abstractmethod
from typing import List
from airport_lookup.core.models import (
    Airport, MetroArea, LookupResult, LookupOptions, AIRPORT, METRO
)


class GazetteerProvider(ABC):
    """One resolution tier probed by the resolver, in order."""

    # Tier name recorded as LookupResult.source and in the hit counters
    source: str = ""

    @abstractmethod
    def probe(self, query: str, options: LookupOptions) -> List[LookupResult]:
        """
        Produce candidates for a normalized query.

        Args:
            query: Normalized query string
            options: Caller lookup options

        Returns:
            Candidate results (empty when this tier has nothing)

        Raises:
            UpstreamError: The backing store or service failed
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Get provider name."""
        pass

    def persists_results(self) -> bool:
        """Whether resolutions from this tier go to the persistent lookup cache."""
        return True


def airport_result(airport: Airport, confidence: float, source: str) -> LookupResult:
    """Build an airport LookupResult from a stored airport."""
    return LookupResult(
        type=AIRPORT,
        iata_code=airport.iata_code,
        name=airport.name,
        city=airport.city,
        country=airport.country,
        country_code=airport.country_code,
        latitude=airport.latitude,
        longitude=airport.longitude,
        timezone=airport.timezone,
        icao_code=airport.icao_code,
        airport_type=airport.airport_type,
        passenger_count=airport.passenger_count,
        confidence=round(confidence, 4),
        source=source,
    )


def metro_result(metro: MetroArea, confidence: float, source: str) -> LookupResult:
    """Build a metro LookupResult from a stored metro area."""
    return LookupResult(
        type=METRO,
        iata_code=metro.iata_code,
        name=metro.name,
        city=metro.name,
        country=metro.country,
        country_code=metro.country_code,
        latitude=metro.latitude,
        longitude=metro.longitude,
        timezone=metro.timezone,
        airport_codes=tuple(metro.airport_codes),
        confidence=round(confidence, 4),
        source=source,
    )

"""Error taxonomy for airport lookups."""
from typing import Optional


class AirportLookupError(Exception):
    """Base class for all lookup errors."""


class InvalidInput(AirportLookupError, ValueError):
    """Bad call-site arguments (empty or non-text query, malformed options)."""


class NotFound(AirportLookupError, LookupError):
    """Every resolution tier was exhausted without a match."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(
            f'Could not resolve airport for "{query}". '
            "Please use a valid city name or IATA code."
        )


class UpstreamError(AirportLookupError):
    """The persistent store or the external API failed."""

    def __init__(self, tier: str, message: str, cause: Optional[BaseException] = None):
        self.tier = tier
        self.cause = cause
        super().__init__(f"[{tier}] {message}")

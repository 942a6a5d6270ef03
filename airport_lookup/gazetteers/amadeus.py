"""Amadeus Self-Service location search as the external lookup tier."""
import time
from threading import Lock
from typing import Any, Dict, List, Optional
import requests
from airport_lookup.core.config import (
    AMADEUS_HOST, AMADEUS_CLIENT_ID, AMADEUS_CLIENT_SECRET,
    AMADEUS_TIMEOUT, ENABLE_API_LOOKUP, API_DEFAULT_CONFIDENCE
)
from airport_lookup.core.errors import UpstreamError
from airport_lookup.core.models import Airport, MetroArea, LookupResult, LookupOptions, SOURCE_API
from airport_lookup.core.scoring import calculate_confidence
from airport_lookup.gazetteers.base import GazetteerProvider, airport_result, metro_result


class AmadeusProvider(GazetteerProvider):
    """Queries /v1/reference-data/locations for airports and city codes."""

    source = SOURCE_API

    def __init__(
        self,
        host: str = AMADEUS_HOST,
        client_id: Optional[str] = AMADEUS_CLIENT_ID,
        client_secret: Optional[str] = AMADEUS_CLIENT_SECRET,
        timeout: float = AMADEUS_TIMEOUT,
        enabled: bool = ENABLE_API_LOOKUP
    ):
        self.host = host
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.enabled = bool(enabled and client_id and client_secret)
        self._token_lock = Lock()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def get_name(self) -> str:
        return "Amadeus API"

    def _access_token(self) -> str:
        with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            resp = requests.post(
                f"https://{self.host}/v1/security/oauth2/token",
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, dict):
                raise UpstreamError(self.source, "Amadeus auth failed: malformed token payload")

            token = payload.get("access_token")
            if not token:
                raise UpstreamError(self.source, "Amadeus auth failed: missing access_token")

            # Refresh 30s ahead of the advertised expiry
            expires_in = int(payload.get("expires_in", 1800))
            self._token = token
            self._token_expires_at = time.monotonic() + max(30, expires_in - 30)
            return token

    def search_locations(self, keyword: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Raw location search.

        Args:
            keyword: Search keyword (city name, airport name or code)
            limit: Page size requested from the API

        Returns:
            List of location records from the ``data`` field

        Raises:
            UpstreamError: Network failure, non-2xx status or malformed payload
        """
        try:
            headers = {"Authorization": f"Bearer {self._access_token()}"}
            params = {"subType": "AIRPORT,CITY", "keyword": keyword.upper(), "page[limit]": limit}
            resp = requests.get(
                f"https://{self.host}/v1/reference-data/locations",
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise UpstreamError(self.source, f"Location search failed: {e}", e) from e
        except ValueError as e:
            raise UpstreamError(self.source, f"Invalid JSON from location search: {e}", e) from e

        if not isinstance(payload, dict):
            raise UpstreamError(self.source, "Malformed location search payload")
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise UpstreamError(self.source, "Malformed location search payload: data is not a list")
        return data

    def probe(self, query: str, options: LookupOptions) -> List[LookupResult]:
        if not self.enabled:
            return []

        results = []
        for item in self.search_locations(query, limit=options.max_results):
            if not isinstance(item, dict):
                raise UpstreamError(self.source, "Malformed location record")
            result = self._to_result(item)
            if result:
                results.append(result)
        return results

    def _to_result(self, item: Dict[str, Any]) -> Optional[LookupResult]:
        """Map one location record to a LookupResult; None when it has no IATA code."""
        code = str(item.get("iataCode") or "").upper()
        if len(code) != 3:
            return None

        address = _as_dict(item.get("address"))
        geo = _as_dict(item.get("geoCode"))
        name = str(item.get("name") or code).title()
        confidence = self._confidence(item)

        if str(item.get("subType") or "").upper() == "CITY":
            codes = item.get("airportCodes")
            members = [str(c).upper() for c in codes if c] if isinstance(codes, list) else []
            metro = MetroArea(
                iata_code=code,
                name=str(address.get("cityName") or name).title(),
                country=str(address.get("countryName") or "").title(),
                country_code=address.get("countryCode"),
                latitude=_to_float(geo.get("latitude")),
                longitude=_to_float(geo.get("longitude")),
                timezone=item.get("timeZoneOffset"),
                airport_codes=members or [code],
            )
            return metro_result(metro, confidence, self.source)

        airport = Airport(
            iata_code=code,
            name=name,
            city=str(address.get("cityName") or address.get("cityCode") or "").title(),
            country=str(address.get("countryName") or "").title(),
            country_code=address.get("countryCode"),
            latitude=_to_float(geo.get("latitude")),
            longitude=_to_float(geo.get("longitude")),
            timezone=item.get("timeZoneOffset"),
        )
        return airport_result(airport, confidence, self.source)

    @staticmethod
    def _confidence(item: Dict[str, Any]) -> float:
        travelers = _as_dict(_as_dict(item.get("analytics")).get("travelers"))
        score = travelers.get("score")
        if score is None:
            return API_DEFAULT_CONFIDENCE
        try:
            return calculate_confidence(float(score) / 100.0)
        except (TypeError, ValueError):
            return API_DEFAULT_CONFIDENCE


def _as_dict(value: Any) -> Dict[str, Any]:
    """Nested record fields that are not objects count as missing."""
    return value if isinstance(value, dict) else {}


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None

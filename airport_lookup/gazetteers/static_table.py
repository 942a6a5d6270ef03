"""Hardcoded last-resort airport table, consulted when every other tier fails."""
from typing import Dict, List, Optional, Tuple
from airport_lookup.core.config import FALLBACK_CONFIDENCE
from airport_lookup.core.models import (
    Airport, MetroArea, LookupResult, LookupOptions, SOURCE_FALLBACK
)
from airport_lookup.core.normalization import normalize_query, is_iata_code
from airport_lookup.gazetteers.base import GazetteerProvider, airport_result, metro_result


# code: (name, city, country, country_code)
FALLBACK_AIRPORTS: Dict[str, Tuple[str, str, str, str]] = {
    # North America
    "YYZ": ("Toronto Pearson International Airport", "Toronto", "Canada", "CA"),
    "YTZ": ("Billy Bishop Toronto City Airport", "Toronto", "Canada", "CA"),
    "YVR": ("Vancouver International Airport", "Vancouver", "Canada", "CA"),
    "YUL": ("Montreal-Pierre Elliott Trudeau International Airport", "Montreal", "Canada", "CA"),
    "YYC": ("Calgary International Airport", "Calgary", "Canada", "CA"),
    "YOW": ("Ottawa Macdonald-Cartier International Airport", "Ottawa", "Canada", "CA"),
    "JFK": ("John F. Kennedy International Airport", "New York", "United States", "US"),
    "LGA": ("LaGuardia Airport", "New York", "United States", "US"),
    "EWR": ("Newark Liberty International Airport", "Newark", "United States", "US"),
    "LAX": ("Los Angeles International Airport", "Los Angeles", "United States", "US"),
    "ORD": ("O'Hare International Airport", "Chicago", "United States", "US"),
    "MDW": ("Chicago Midway International Airport", "Chicago", "United States", "US"),
    "SFO": ("San Francisco International Airport", "San Francisco", "United States", "US"),
    "MIA": ("Miami International Airport", "Miami", "United States", "US"),
    "SEA": ("Seattle-Tacoma International Airport", "Seattle", "United States", "US"),
    "BOS": ("Logan International Airport", "Boston", "United States", "US"),
    "DFW": ("Dallas/Fort Worth International Airport", "Dallas", "United States", "US"),
    "IAH": ("George Bush Intercontinental Airport", "Houston", "United States", "US"),
    "DEN": ("Denver International Airport", "Denver", "United States", "US"),
    "ATL": ("Hartsfield-Jackson Atlanta International Airport", "Atlanta", "United States", "US"),
    "LAS": ("Harry Reid International Airport", "Las Vegas", "United States", "US"),
    "MCO": ("Orlando International Airport", "Orlando", "United States", "US"),
    "PHX": ("Phoenix Sky Harbor International Airport", "Phoenix", "United States", "US"),
    "PHL": ("Philadelphia International Airport", "Philadelphia", "United States", "US"),
    "SAN": ("San Diego International Airport", "San Diego", "United States", "US"),
    "IAD": ("Washington Dulles International Airport", "Washington", "United States", "US"),
    "DCA": ("Ronald Reagan Washington National Airport", "Washington", "United States", "US"),
    "BWI": ("Baltimore/Washington International Airport", "Baltimore", "United States", "US"),
    "MEX": ("Mexico City International Airport", "Mexico City", "Mexico", "MX"),
    "CUN": ("Cancun International Airport", "Cancun", "Mexico", "MX"),
    # Europe
    "LHR": ("London Heathrow Airport", "London", "United Kingdom", "GB"),
    "LGW": ("London Gatwick Airport", "London", "United Kingdom", "GB"),
    "STN": ("London Stansted Airport", "London", "United Kingdom", "GB"),
    "LCY": ("London City Airport", "London", "United Kingdom", "GB"),
    "CDG": ("Charles de Gaulle Airport", "Paris", "France", "FR"),
    "ORY": ("Paris Orly Airport", "Paris", "France", "FR"),
    "MAD": ("Adolfo Suarez Madrid-Barajas Airport", "Madrid", "Spain", "ES"),
    "BCN": ("Barcelona-El Prat Airport", "Barcelona", "Spain", "ES"),
    "FCO": ("Leonardo da Vinci-Fiumicino Airport", "Rome", "Italy", "IT"),
    "MXP": ("Milan Malpensa Airport", "Milan", "Italy", "IT"),
    "LIN": ("Milan Linate Airport", "Milan", "Italy", "IT"),
    "AMS": ("Amsterdam Airport Schiphol", "Amsterdam", "Netherlands", "NL"),
    "FRA": ("Frankfurt Airport", "Frankfurt", "Germany", "DE"),
    "MUC": ("Munich Airport", "Munich", "Germany", "DE"),
    "BER": ("Berlin Brandenburg Airport", "Berlin", "Germany", "DE"),
    "DUB": ("Dublin Airport", "Dublin", "Ireland", "IE"),
    "ZRH": ("Zurich Airport", "Zurich", "Switzerland", "CH"),
    "VIE": ("Vienna International Airport", "Vienna", "Austria", "AT"),
    "LIS": ("Lisbon Humberto Delgado Airport", "Lisbon", "Portugal", "PT"),
    "CPH": ("Copenhagen Airport", "Copenhagen", "Denmark", "DK"),
    "ARN": ("Stockholm Arlanda Airport", "Stockholm", "Sweden", "SE"),
    "OSL": ("Oslo Airport", "Oslo", "Norway", "NO"),
    "ATH": ("Athens International Airport", "Athens", "Greece", "GR"),
    "IST": ("Istanbul Airport", "Istanbul", "Turkey", "TR"),
    "SVO": ("Sheremetyevo International Airport", "Moscow", "Russia", "RU"),
    # Asia, Oceania and Middle East
    "HND": ("Haneda Airport", "Tokyo", "Japan", "JP"),
    "NRT": ("Narita International Airport", "Tokyo", "Japan", "JP"),
    "KIX": ("Kansai International Airport", "Osaka", "Japan", "JP"),
    "SIN": ("Singapore Changi Airport", "Singapore", "Singapore", "SG"),
    "HKG": ("Hong Kong International Airport", "Hong Kong", "Hong Kong", "HK"),
    "ICN": ("Incheon International Airport", "Seoul", "South Korea", "KR"),
    "PEK": ("Beijing Capital International Airport", "Beijing", "China", "CN"),
    "PVG": ("Shanghai Pudong International Airport", "Shanghai", "China", "CN"),
    "BKK": ("Suvarnabhumi Airport", "Bangkok", "Thailand", "TH"),
    "DEL": ("Indira Gandhi International Airport", "Delhi", "India", "IN"),
    "BOM": ("Chhatrapati Shivaji Maharaj International Airport", "Mumbai", "India", "IN"),
    "DXB": ("Dubai International Airport", "Dubai", "United Arab Emirates", "AE"),
    "DOH": ("Hamad International Airport", "Doha", "Qatar", "QA"),
    "SYD": ("Sydney Kingsford Smith Airport", "Sydney", "Australia", "AU"),
    "MEL": ("Melbourne Airport", "Melbourne", "Australia", "AU"),
    "AKL": ("Auckland Airport", "Auckland", "New Zealand", "NZ"),
    # South America and Africa
    "GRU": ("Sao Paulo/Guarulhos International Airport", "Sao Paulo", "Brazil", "BR"),
    "CGH": ("Congonhas Airport", "Sao Paulo", "Brazil", "BR"),
    "GIG": ("Rio de Janeiro/Galeao International Airport", "Rio de Janeiro", "Brazil", "BR"),
    "SDU": ("Santos Dumont Airport", "Rio de Janeiro", "Brazil", "BR"),
    "EZE": ("Ministro Pistarini International Airport", "Buenos Aires", "Argentina", "AR"),
    "AEP": ("Jorge Newbery Airfield", "Buenos Aires", "Argentina", "AR"),
    "BOG": ("El Dorado International Airport", "Bogota", "Colombia", "CO"),
    "LIM": ("Jorge Chavez International Airport", "Lima", "Peru", "PE"),
    "JNB": ("O.R. Tambo International Airport", "Johannesburg", "South Africa", "ZA"),
    "CAI": ("Cairo International Airport", "Cairo", "Egypt", "EG"),
}

# code: (name, country, country_code, member airports with primary first)
FALLBACK_METROS: Dict[str, Tuple[str, str, str, Tuple[str, ...]]] = {
    "NYC": ("New York City", "United States", "US", ("JFK", "LGA", "EWR")),
    "CHI": ("Chicago", "United States", "US", ("ORD", "MDW")),
    "WAS": ("Washington D.C.", "United States", "US", ("DCA", "IAD", "BWI")),
    "YTO": ("Toronto", "Canada", "CA", ("YYZ", "YTZ")),
    "LON": ("London", "United Kingdom", "GB", ("LHR", "LGW", "STN", "LCY")),
    "PAR": ("Paris", "France", "FR", ("CDG", "ORY")),
    "MIL": ("Milan", "Italy", "IT", ("MXP", "LIN")),
    "STO": ("Stockholm", "Sweden", "SE", ("ARN",)),
    "MOW": ("Moscow", "Russia", "RU", ("SVO",)),
    "TYO": ("Tokyo", "Japan", "JP", ("HND", "NRT")),
    "OSA": ("Osaka", "Japan", "JP", ("KIX",)),
    "SAO": ("Sao Paulo", "Brazil", "BR", ("GRU", "CGH")),
    "RIO": ("Rio de Janeiro", "Brazil", "BR", ("GIG", "SDU")),
    "BUE": ("Buenos Aires", "Argentina", "AR", ("EZE", "AEP")),
}

# Normalized city name or informal alias -> primary airport code
CITY_INDEX: Dict[str, str] = {
    "toronto": "YYZ",
    "vancouver": "YVR",
    "montreal": "YUL",
    "calgary": "YYC",
    "ottawa": "YOW",
    "new york": "JFK",
    "manhattan": "JFK",
    "los angeles": "LAX",
    "la": "LAX",
    "chicago": "ORD",
    "san francisco": "SFO",
    "sf": "SFO",
    "miami": "MIA",
    "seattle": "SEA",
    "boston": "BOS",
    "dallas": "DFW",
    "houston": "IAH",
    "denver": "DEN",
    "atlanta": "ATL",
    "las vegas": "LAS",
    "vegas": "LAS",
    "orlando": "MCO",
    "phoenix": "PHX",
    "philadelphia": "PHL",
    "philly": "PHL",
    "san diego": "SAN",
    "washington": "DCA",
    "washington dc": "DCA",
    "dc": "DCA",
    "baltimore": "BWI",
    "mexico": "MEX",
    "cancun": "CUN",
    "london": "LHR",
    "paris": "CDG",
    "madrid": "MAD",
    "barcelona": "BCN",
    "rome": "FCO",
    "milan": "MXP",
    "amsterdam": "AMS",
    "frankfurt": "FRA",
    "munich": "MUC",
    "berlin": "BER",
    "dublin": "DUB",
    "zurich": "ZRH",
    "vienna": "VIE",
    "lisbon": "LIS",
    "copenhagen": "CPH",
    "stockholm": "ARN",
    "oslo": "OSL",
    "athens": "ATH",
    "istanbul": "IST",
    "moscow": "SVO",
    "tokyo": "HND",
    "osaka": "KIX",
    "singapore": "SIN",
    "hong kong": "HKG",
    "seoul": "ICN",
    "beijing": "PEK",
    "shanghai": "PVG",
    "bangkok": "BKK",
    "delhi": "DEL",
    "new delhi": "DEL",
    "mumbai": "BOM",
    "dubai": "DXB",
    "doha": "DOH",
    "sydney": "SYD",
    "melbourne": "MEL",
    "auckland": "AKL",
    "sao paulo": "GRU",
    "são paulo": "GRU",
    "rio de janeiro": "GIG",
    "rio": "GIG",
    "buenos aires": "EZE",
    "bogota": "BOG",
    "lima": "LIM",
    "johannesburg": "JNB",
    "cairo": "CAI",
}

# Member airport -> metro code
_AIRPORT_TO_METRO: Dict[str, str] = {
    airport_code: metro_code
    for metro_code, (_, _, _, members) in FALLBACK_METROS.items()
    for airport_code in members
}


def _airport(code: str) -> Airport:
    name, city, country, country_code = FALLBACK_AIRPORTS[code]
    return Airport(iata_code=code, name=name, city=city, country=country, country_code=country_code)


def _metro(code: str) -> MetroArea:
    name, country, country_code, members = FALLBACK_METROS[code]
    return MetroArea(
        iata_code=code,
        name=name,
        country=country,
        country_code=country_code,
        airport_codes=list(members),
    )


def fallback_lookup(query: str, prefer_metro: bool = True) -> Optional[LookupResult]:
    """
    Resolve a query against the static table.

    Matching is exact on a known city name, informal alias or code; there
    is no fuzzy scoring.

    Args:
        query: Raw or normalized query text
        prefer_metro: Resolve cities that belong to a metro area to the metro

    Returns:
        LookupResult with source "fallback", or None
    """
    normalized = normalize_query(query or "")
    if not normalized:
        return None

    if is_iata_code(normalized):
        code = normalized.upper()
        if code in FALLBACK_METROS:
            return metro_result(_metro(code), FALLBACK_CONFIDENCE, SOURCE_FALLBACK)
        if code in FALLBACK_AIRPORTS:
            return airport_result(_airport(code), FALLBACK_CONFIDENCE, SOURCE_FALLBACK)

    airport_code = CITY_INDEX.get(normalized)
    if not airport_code:
        return None

    if prefer_metro and airport_code in _AIRPORT_TO_METRO:
        return metro_result(_metro(_AIRPORT_TO_METRO[airport_code]), FALLBACK_CONFIDENCE, SOURCE_FALLBACK)

    return airport_result(_airport(airport_code), FALLBACK_CONFIDENCE, SOURCE_FALLBACK)


class StaticFallbackProvider(GazetteerProvider):
    """Static table tier; available even when the store and the API are down."""

    source = SOURCE_FALLBACK

    def probe(self, query: str, options: LookupOptions) -> List[LookupResult]:
        result = fallback_lookup(query, options.prefer_metro)
        return [result] if result else []

    def get_name(self) -> str:
        return "Static Fallback"

    def persists_results(self) -> bool:
        return False

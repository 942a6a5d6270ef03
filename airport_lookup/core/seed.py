"""Seed the airport store from the OurAirports.com airports.csv export."""
from typing import Dict, List, Tuple, Union, Any
from pathlib import Path
import pandas as pd
from tqdm import tqdm
from airport_lookup.core.duckdb_store import DuckDBStore
from airport_lookup.core.models import Airport, MetroArea, AirportAlias
from airport_lookup.utils.logging import log_structured


AIRPORT_TYPES = ("large_airport", "medium_airport")
ALIAS_MATCH_WEIGHT = 0.95

# Metro code -> (name, country, country_code, member airports with primary first)
METRO_AREA_MAPPINGS: Dict[str, Tuple[str, str, str, Tuple[str, ...]]] = {
    "NYC": ("New York City", "United States", "US", ("JFK", "LGA", "EWR")),
    "LON": ("London", "United Kingdom", "GB", ("LHR", "LGW", "STN", "LTN", "LCY", "SEN")),
    "TYO": ("Tokyo", "Japan", "JP", ("HND", "NRT")),
    "PAR": ("Paris", "France", "FR", ("CDG", "ORY", "BVA")),
    "YTO": ("Toronto", "Canada", "CA", ("YYZ", "YTZ")),
    "OSA": ("Osaka", "Japan", "JP", ("KIX", "ITM")),
    "CHI": ("Chicago", "United States", "US", ("ORD", "MDW")),
    "WAS": ("Washington D.C.", "United States", "US", ("DCA", "IAD", "BWI")),
    "MIL": ("Milan", "Italy", "IT", ("MXP", "LIN", "BGY")),
    "SAO": ("Sao Paulo", "Brazil", "BR", ("GRU", "CGH", "VCP")),
    "BUE": ("Buenos Aires", "Argentina", "AR", ("EZE", "AEP")),
    "RIO": ("Rio de Janeiro", "Brazil", "BR", ("GIG", "SDU")),
    "MOW": ("Moscow", "Russia", "RU", ("SVO", "DME", "VKO")),
    "BER": ("Berlin", "Germany", "DE", ("BER",)),
    "STO": ("Stockholm", "Sweden", "SE", ("ARN", "BMA", "NYO")),
}

# Airport code -> common alternative names and misspellings
AIRPORT_ALIASES: Dict[str, Tuple[str, ...]] = {
    "JFK": ("Kennedy", "JFK Airport", "New York JFK", "john f kennedy"),
    "LGA": ("LaGuardia", "La Guardia", "LGA Airport"),
    "EWR": ("Newark", "Newark Airport", "EWR Airport"),
    "LHR": ("Heathrow", "London Heathrow"),
    "LGW": ("Gatwick", "London Gatwick"),
    "CDG": ("Charles de Gaulle", "Roissy", "Paris CDG"),
    "ORY": ("Orly", "Paris Orly"),
    "YYZ": ("Pearson", "Toronto Pearson", "YYZ Airport"),
    "LAX": ("LAX Airport", "Los Angeles Airport", "LA Airport"),
    "SFO": ("SFO Airport", "San Francisco Airport", "SF Airport"),
    "ORD": ("O'Hare", "Ohare", "Chicago O'Hare"),
    "MDW": ("Midway", "Chicago Midway"),
    "MIA": ("Miami Airport", "MIA Airport"),
    "DXB": ("Dubai Airport", "Dubai International"),
    "SIN": ("Changi", "Singapore Changi"),
    "HND": ("Haneda", "Tokyo Haneda"),
    "NRT": ("Narita", "Tokyo Narita"),
    "ICN": ("Incheon", "Seoul Incheon"),
    "HKG": ("Hong Kong Airport", "Chek Lap Kok"),
    "SYD": ("Sydney Airport", "Kingsford Smith"),
    "MEL": ("Melbourne Airport", "Tullamarine"),
    "AMS": ("Schiphol", "Amsterdam Schiphol"),
    "FRA": ("Frankfurt Airport", "Frankfurt Main"),
    "MUC": ("Munich Airport", "München"),
    "BCN": ("Barcelona Airport", "El Prat"),
    "MAD": ("Madrid Airport", "Barajas", "Adolfo Suárez"),
    "FCO": ("Fiumicino", "Rome Fiumicino", "Leonardo da Vinci"),
    "IST": ("Istanbul Airport", "Istanbul New Airport"),
    "DFW": ("Dallas Fort Worth", "DFW Airport"),
    "ATL": ("Atlanta Airport", "Hartsfield Jackson"),
    "DEN": ("Denver Airport", "DIA"),
    "SEA": ("Seattle Airport", "SeaTac", "Sea-Tac"),
    "BOS": ("Logan", "Boston Logan"),
    "IAH": ("Houston Airport", "Bush Intercontinental"),
    "PHX": ("Phoenix Airport", "Sky Harbor"),
    "LAS": ("Las Vegas Airport", "McCarran"),
    "MCO": ("Orlando Airport", "MCO Airport"),
    "PHL": ("Philadelphia Airport", "PHL Airport"),
    "BWI": ("Baltimore Airport", "BWI Marshall"),
    "SAN": ("San Diego Airport", "Lindbergh Field"),
    "CUN": ("Cancun Airport", "Cancún"),
    "MEX": ("Mexico City Airport", "Benito Juárez"),
    "YVR": ("Vancouver Airport", "YVR Airport"),
    "YUL": ("Montreal Airport", "Trudeau", "Pierre Elliott Trudeau"),
    "GRU": ("Guarulhos", "São Paulo Guarulhos", "Sao Paulo Airport"),
    "EZE": ("Ezeiza", "Buenos Aires Ezeiza", "Ministro Pistarini"),
    "GIG": ("Galeão", "Rio Galeao", "Rio Airport", "Tom Jobim"),
    "BOG": ("Bogota Airport", "El Dorado"),
    "LIM": ("Lima Airport", "Jorge Chávez", "Jorge Chavez"),
    "SCL": ("Santiago Airport", "Arturo Merino Benítez"),
}

OURAIRPORTS_COLUMNS = (
    "ident", "type", "name", "latitude_deg", "longitude_deg",
    "iso_country", "municipality", "iata_code",
)


def load_ourairports(source: Union[str, Path]) -> pd.DataFrame:
    """
    Read an OurAirports airports.csv and keep seedable rows.

    Args:
        source: Local path or URL of airports.csv

    Returns:
        DataFrame of large/medium airports with a 3-letter IATA code
    """
    df = pd.read_csv(source, dtype=str, keep_default_na=False)

    missing = [col for col in OURAIRPORTS_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"airports.csv is missing columns: {', '.join(missing)}")

    df["iata_code"] = df["iata_code"].str.strip().str.upper()
    df = df[df["type"].isin(AIRPORT_TYPES) & df["iata_code"].str.fullmatch(r"[A-Z]{3}")]
    return df.drop_duplicates(subset="iata_code").reset_index(drop=True)


def _to_float(value: Any):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(value) else value


def _row_to_airport(row) -> Airport:
    country = (row.get("iso_country") or "").strip()
    return Airport(
        iata_code=row["iata_code"],
        name=str(row["name"]).strip(),
        city=(row.get("municipality") or "").strip() or "Unknown",
        country=country or "Unknown",
        country_code=country or None,
        icao_code=(row.get("ident") or "").strip() or None,
        latitude=_to_float(row.get("latitude_deg")),
        longitude=_to_float(row.get("longitude_deg")),
        airport_type=str(row["type"]).replace("_airport", ""),
        is_active=True,
    )


def build_metro_areas(airports: Dict[str, Airport]) -> List[MetroArea]:
    """
    Build metro areas from METRO_AREA_MAPPINGS.

    Members missing from ``airports`` are dropped; a metro left with no
    members is skipped. Coordinates are the mean of the member airports.
    """
    metros = []
    for code, (name, country, country_code, members) in METRO_AREA_MAPPINGS.items():
        present = [airports[m] for m in members if m in airports]
        if not present:
            log_structured("warning", "Metro area has no seeded airports", metro=code)
            continue

        lats = [a.latitude for a in present if a.latitude is not None]
        lons = [a.longitude for a in present if a.longitude is not None]
        metros.append(MetroArea(
            iata_code=code,
            name=name,
            country=country,
            country_code=country_code,
            latitude=sum(lats) / len(lats) if lats else None,
            longitude=sum(lons) / len(lons) if lons else None,
            airport_codes=[a.iata_code for a in present],
        ))
    return metros


def seed_store(store: DuckDBStore, airports_df: pd.DataFrame, progress: bool = False) -> Dict[str, int]:
    """
    Write airports, metro areas, associations and aliases.

    Args:
        store: Target DuckDBStore
        airports_df: Output of load_ourairports (or a frame with the same columns)
        progress: Show a progress bar while converting rows

    Returns:
        Counts of airports, metro_areas, associations and aliases written
    """
    airports: Dict[str, Airport] = {}
    for _, row in tqdm(airports_df.iterrows(), total=len(airports_df), desc="Airports", disable=not progress):
        airport = _row_to_airport(row)
        airports[airport.iata_code] = airport

    counts = {"airports": store.upsert_airports(airports.values())}

    metros = build_metro_areas(airports)
    counts["metro_areas"] = len(metros)
    counts["associations"] = sum(store.upsert_metro_area(metro) for metro in metros)

    aliases = [
        AirportAlias(airport_code=code, alias=alias, match_weight=ALIAS_MATCH_WEIGHT)
        for code, names in AIRPORT_ALIASES.items()
        if code in airports
        for alias in names
    ]
    counts["aliases"] = store.upsert_aliases(aliases)

    log_structured("info", "Airport store seeded", **counts)
    return counts

"""Query normalization for airport lookups."""
import re


# Trailing noise stripped once each, in this order
NOISE_SUFFIXES = (" city", " airport")

# Leading article / travel prepositions
LEADING_NOISE = re.compile(r"^(the|from|to)\s+", re.IGNORECASE)

IATA_PATTERN = re.compile(r"^[A-Za-z]{3}$")


def normalize_query(text: str) -> str:
    """
    Normalize a user query for matching and cache keys.

    Lowercases, trims, collapses whitespace, strips a trailing " city" and
    " airport" and a leading "the " (or "from " / "to ").

    Args:
        text: Raw query text

    Returns:
        Normalized query string
    """
    if not text:
        return ""

    # Lowercase and collapse whitespace
    normalized = re.sub(r"\s+", " ", text.lower()).strip()

    for suffix in NOISE_SUFFIXES:
        if normalized.endswith(suffix):
            normalized = normalized[:-len(suffix)].strip()

    normalized = LEADING_NOISE.sub("", normalized)

    return normalized.strip()


def get_cache_key(normalized_query: str, prefer_metro: bool) -> str:
    """Build the memory cache key for a normalized query."""
    return f"{normalized_query}:{'metro' if prefer_metro else 'airport'}"


def is_iata_code(text: str) -> bool:
    """True when text is exactly three letters."""
    return bool(text) and bool(IATA_PATTERN.match(text))

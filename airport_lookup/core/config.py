"""Configuration management for the airport lookup engine."""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", PROJECT_ROOT / "data"))
DUCKDB_PATH = Path(os.getenv("DATABASE_PATH", DATA_DIR / "duckdb" / "airports.duckdb"))

# Seed data source (OurAirports.com export)
OURAIRPORTS_URL: str = os.getenv(
    "OURAIRPORTS_URL",
    "https://davidmegginson.github.io/ourairports-data/airports.csv"
)

# Memory cache
MEMORY_CACHE_SIZE: int = int(os.getenv("MEMORY_CACHE_SIZE", "1000"))

# Matching and scoring
FUZZY_THRESHOLD: float = float(os.getenv("FUZZY_THRESHOLD", "0.3"))  # raw similarity floor
MIN_CONFIDENCE: float = float(os.getenv("MIN_CONFIDENCE", "0.5"))
METRO_BONUS: float = float(os.getenv("METRO_BONUS", "0.05"))
TIE_EPSILON: float = float(os.getenv("TIE_EPSILON", "0.05"))
FALLBACK_CONFIDENCE: float = 0.9
API_DEFAULT_CONFIDENCE: float = 0.7

# Lookup options
DEFAULT_MAX_RESULTS: int = int(os.getenv("DEFAULT_MAX_RESULTS", "5"))
MAX_RESULTS_LIMIT: int = 50
MAX_BATCH_SIZE: int = int(os.getenv("MAX_BATCH_SIZE", "50"))
BATCH_WORKERS: int = int(os.getenv("BATCH_WORKERS", "8"))

# Persistent lookup cache
DB_CACHE_MAX_AGE_DAYS: int = int(os.getenv("DB_CACHE_MAX_AGE_DAYS", "7"))
DB_CACHE_RETENTION_DAYS: int = int(os.getenv("DB_CACHE_RETENTION_DAYS", "30"))

# Amadeus Self-Service API (external geocoding tier)
AMADEUS_HOST: str = os.getenv("AMADEUS_HOST", "test.api.amadeus.com")
AMADEUS_CLIENT_ID: Optional[str] = os.getenv("AMADEUS_CLIENT_ID")
AMADEUS_CLIENT_SECRET: Optional[str] = os.getenv("AMADEUS_CLIENT_SECRET")
AMADEUS_TIMEOUT: float = float(os.getenv("AMADEUS_TIMEOUT", "5"))
ENABLE_API_LOOKUP: bool = os.getenv("ENABLE_API_LOOKUP", "true").lower() == "true"

# Logging and error tracking
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")

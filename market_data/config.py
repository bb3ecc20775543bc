"""
Configuration for the market data layer.
Reads defaults from the .env file in the project root.

POLYGON_API_KEY is only a default for the front end to pass into
MarketDataService(api_key=...); providers never read the environment.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).parent.parent / ".env"
load_dotenv(_env_path)

POLYGON_API_KEY: str = os.getenv("POLYGON_API_KEY", "")

# Historical bars do not change, so a short TTL only bounds memory
CACHE_TTL_SECONDS: int = int(os.getenv("MARKET_DATA_CACHE_TTL", "300"))
CACHE_MAX_ENTRIES: int = int(os.getenv("MARKET_DATA_CACHE_SIZE", "256"))

REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("MARKET_DATA_TIMEOUT", "30"))

NEWS_LIMIT: int = 20

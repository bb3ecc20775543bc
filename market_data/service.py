"""
MarketDataService: single entry point for market data in the explorer.

  get_daily_bars()   → List[Bar]  one bar per session
  get_minute_bars()  → List[Bar]  raw minute bars, extended hours included
  get_session_bars() → List[Bar]  one day's minute bars, regular session only
  get_news()         → List[NewsArticle]

The API key is handed in by the caller; without one the service falls back
to Yahoo Finance. Nothing is retried here.
"""
import logging
from datetime import date
from typing import Callable, List, Optional

from errors import InvalidParameterError
from models import Bar
from session_filter import MarketSessionFilter

from .cache import TTLCache
from .config import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS, NEWS_LIMIT
from .models import NewsArticle
from .providers.polygon_provider import PolygonProvider
from .providers.yfinance_provider import YFinanceProvider

logger = logging.getLogger(__name__)


class MarketDataService:
    """
    Cached access to historical bars and news.

    Instantiate once per credential and share the instance; the TTL cache
    prevents refetching the same range on every rerun of the page.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        provider=None,
        cache_ttl: int = CACHE_TTL_SECONDS,
    ):
        self._cache = TTLCache(ttl_seconds=cache_ttl, max_entries=CACHE_MAX_ENTRIES)
        if provider is not None:
            self._provider = provider
        elif api_key:
            self._provider = PolygonProvider(api_key)
        else:
            logger.info(
                "MarketDataService: no Polygon API key supplied, using Yahoo Finance. "
                "Minute history is limited to roughly the last 30 days."
            )
            self._provider = YFinanceProvider()

    @property
    def source(self) -> str:
        return getattr(self._provider, "name", type(self._provider).__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_daily_bars(self, ticker: str, start: date, end: date) -> List[Bar]:
        """
        Daily bars for ticker, oldest first.

        Raises:
            NoDataError / MarketDataError from the provider
        """
        return self._aggregates(ticker, "day", start, end)

    def get_minute_bars(self, ticker: str, start: date, end: date) -> List[Bar]:
        """Minute bars for ticker over the date range, oldest first."""
        return self._aggregates(ticker, "minute", start, end)

    def get_session_bars(self, ticker: str, day: date) -> List[Bar]:
        """
        One day's minute bars restricted to 09:30-16:00 local time.
        May be empty when the provider only had extended-hours bars.
        """
        return MarketSessionFilter.filter(self.get_minute_bars(ticker, day, day))

    def get_news(self, ticker: str, limit: int = NEWS_LIMIT) -> List[NewsArticle]:
        if not ticker:
            return []
        return self._cached(
            ("news", ticker.upper(), limit),
            lambda: self._provider.get_news(ticker, limit),
        )

    def refresh_cache(self) -> None:
        """Force-clear the cache so the next call fetches fresh data."""
        self._cache.clear()
        logger.info("MarketDataService: cache cleared.")

    # ------------------------------------------------------------------

    def _aggregates(self, ticker: str, timespan: str, start: date, end: date) -> List[Bar]:
        if not ticker:
            raise InvalidParameterError("Select a ticker first")
        if start > end:
            raise InvalidParameterError(f"Start date {start} is after end date {end}")
        key = (timespan, ticker.upper(), start.isoformat(), end.isoformat())
        return self._cached(
            key, lambda: self._provider.get_aggregates(ticker, timespan, start, end)
        )

    def _cached(self, key: tuple, fetch: Callable[[], list]) -> list:
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        result = fetch()
        self._cache.set(key, result)
        return result

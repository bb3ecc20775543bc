"""
Polygon provider: historical aggregates and ticker news over REST.
Source: api.polygon.io (API key required, passed in by the caller).
"""
import logging
from datetime import date
from typing import List, Optional

import requests

from errors import InvalidParameterError, MarketDataError, NoDataError
from models import Bar, bars_from_aggregates

from ..config import NEWS_LIMIT, REQUEST_TIMEOUT_SECONDS
from ..models import TIMESPANS, NewsArticle

logger = logging.getLogger(__name__)

POLYGON_BASE_URL = "https://api.polygon.io"
SUCCESS_STATUSES = ("OK", "DELAYED")


def parse_aggregates_response(payload) -> List[Bar]:
    """
    Turn an aggregates response body into Bars.

    OK and DELAYED are both success; any other status, or a missing/empty
    results list, means there is nothing to show.

    Raises:
        NoDataError
    """
    if not isinstance(payload, dict):
        raise NoDataError()
    if payload.get("status") not in SUCCESS_STATUSES:
        raise NoDataError(payload.get("error") or payload.get("message") or "No data available")
    results = payload.get("results")
    if not results:
        raise NoDataError("No data available for this period")
    return bars_from_aggregates(results)


class PolygonProvider:
    """Aggregates (1/minute, 1/day) and news from Polygon."""

    name = "Polygon"

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise InvalidParameterError("Polygon provider needs an API key")
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    def _get(self, path: str, params: dict) -> dict:
        url = f"{POLYGON_BASE_URL}{path}"
        try:
            response = self._session.get(
                url, params={**params, "apiKey": self._api_key}, timeout=self._timeout
            )
        except requests.RequestException as exc:
            logger.warning(f"Polygon: request to {path} failed: {exc}")
            raise MarketDataError(f"Could not reach Polygon: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            detail = (payload or {}).get("error") or (payload or {}).get("message") or response.reason
            logger.warning(f"Polygon: HTTP {response.status_code} for {path}: {detail}")
            raise MarketDataError(f"Polygon returned HTTP {response.status_code}: {detail}")
        if payload is None:
            raise MarketDataError("Polygon returned a response that is not JSON")
        return payload

    def get_aggregates(self, ticker: str, timespan: str, start: date, end: date) -> List[Bar]:
        """
        Bars for ticker between two calendar dates (inclusive), oldest first.

        Raises:
            MarketDataError: transport or HTTP failure
            NoDataError:     upstream had nothing for the range
        """
        if timespan not in TIMESPANS:
            raise InvalidParameterError(f"timespan must be one of {TIMESPANS}, got {timespan!r}")
        path = (
            f"/v2/aggs/ticker/{ticker.upper()}/range/1/{timespan}/"
            f"{start.isoformat()}/{end.isoformat()}"
        )
        payload = self._get(path, {"adjusted": "true", "sort": "asc", "limit": 50000})
        bars = parse_aggregates_response(payload)
        logger.info(f"Polygon: {len(bars)} {timespan} bars for {ticker} {start} → {end}")
        return bars

    def get_news(self, ticker: str, limit: int = NEWS_LIMIT) -> List[NewsArticle]:
        """Latest headlines, newest first. Failures give an empty list."""
        try:
            payload = self._get(
                "/v2/reference/news",
                {"ticker": ticker.upper(), "limit": limit, "sort": "published_utc", "order": "desc"},
            )
        except MarketDataError:
            return []

        if payload.get("status") != "OK":
            logger.warning(f"Polygon: news for {ticker} returned status {payload.get('status')}")
            return []

        articles: List[NewsArticle] = []
        for item in payload.get("results") or []:
            try:
                articles.append(NewsArticle.from_polygon(item))
            except (KeyError, ValueError) as exc:
                logger.warning(f"Polygon: skipping news item: {exc}")
        return articles

"""
yfinance provider: key-less fallback for historical bars.
Source: Yahoo Finance (free, no auth; 1-minute history only reaches back ~30 days).
"""
import logging
from datetime import date, timedelta
from typing import List

import pandas as pd
import yfinance as yf

from errors import InvalidParameterError, MarketDataError, NoDataError
from models import Bar, bars_from_aggregates

from ..models import NewsArticle

logger = logging.getLogger(__name__)

_INTERVALS = {
    "minute": "1m",
    "day": "1d",
}


def history_to_aggregates(history: pd.DataFrame) -> List[dict]:
    """
    Convert a Ticker.history() frame to aggregate items ({t, o, h, l, c, v}),
    so Yahoo data goes through the same normalisation as Polygon data.
    """
    index = history.index
    if index.tz is None:
        index = index.tz_localize("America/New_York")

    items: List[dict] = []
    for ts, (_, row) in zip(index, history.iterrows()):
        items.append(
            {
                "t": int(ts.timestamp() * 1000),
                "o": float(row["Open"]),
                "h": float(row["High"]),
                "l": float(row["Low"]),
                "c": float(row["Close"]),
                "v": float(row.get("Volume", 0) or 0),
            }
        )
    return items


class YFinanceProvider:
    """Aggregates from Yahoo Finance. News is not offered."""

    name = "Yahoo Finance"

    def get_aggregates(self, ticker: str, timespan: str, start: date, end: date) -> List[Bar]:
        """
        Bars for ticker between two calendar dates (inclusive), oldest first.

        Raises:
            MarketDataError: yfinance raised
            NoDataError:     nothing returned for the range
        """
        interval = _INTERVALS.get(timespan)
        if interval is None:
            raise InvalidParameterError(f"Unsupported timespan {timespan!r}")

        try:
            history = yf.Ticker(ticker.upper()).history(
                start=start.isoformat(),
                end=(end + timedelta(days=1)).isoformat(),
                interval=interval,
                auto_adjust=False,
            )
        except Exception as exc:
            logger.warning(f"yfinance: failed to get {timespan} bars for {ticker}: {exc}")
            raise MarketDataError(f"Yahoo Finance request failed: {exc}") from exc

        if history is None or history.empty:
            logger.warning(f"yfinance: no {timespan} data for {ticker} {start} → {end}")
            raise NoDataError(f"No data available for {ticker} between {start} and {end}")

        bars = bars_from_aggregates(history_to_aggregates(history))
        logger.info(f"yfinance: {len(bars)} {timespan} bars for {ticker}")
        return bars

    def get_news(self, ticker: str, limit: int = 20) -> List[NewsArticle]:
        logger.info("News not available via Yahoo Finance provider")
        return []

"""
Data models for the 0DTE Options Explorer
"""
import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Literal, Optional

import pandas as pd

from errors import NoDataError

logger = logging.getLogger(__name__)

OptionType = Literal["CALL", "PUT"]
MoveDirection = Literal["UP", "DOWN"]
DirectionFilter = Literal["UP", "DOWN", "BOTH"]
ChartMode = Literal["STOCK", "OPTION"]
Moneyness = Literal["ATM", "ITM", "OTM"]

OPTION_TYPES = ("CALL", "PUT")


def round_strike(price: float) -> int:
    """Round a price to the nearest whole-dollar strike (halves round up)."""
    return int(math.floor(price + 0.5))


@dataclass(frozen=True)
class Bar:
    """One OHLCV bar; timestamp is a timezone-aware UTC instant."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class VolatileDay:
    """A session whose open-to-close move passed the daily scanner filters."""
    date: date
    move_percent: float
    move_amount: float
    direction: MoveDirection
    volume: float
    open_price: float
    close_price: float


@dataclass(frozen=True)
class Pattern:
    """Intraday entry/exit candidate found by the pattern scanner."""
    entry_time: datetime
    exit_time: datetime
    entry_price: float
    exit_price: float
    stock_move: float
    move_percent: float
    hold_minutes: int
    direction: OptionType
    leverage: float
    estimated_profit: float
    volume: float
    success: bool

    @property
    def strike(self) -> int:
        """Strike used when the pattern is traded: the rounded entry price."""
        return round_strike(self.entry_price)


@dataclass(frozen=True)
class OptionSelection:
    """
    Option the user is tracking across days.
    current_view_date never passes expiry_date and is always a weekday.
    """
    strike: int
    option_type: OptionType
    expiry_date: date
    current_view_date: date

    def with_view_date(self, view_date: date) -> "OptionSelection":
        return replace(self, current_view_date=view_date)

    @property
    def label(self) -> str:
        return f"{self.option_type} ${self.strike} Strike"


@dataclass(frozen=True)
class PricePoint:
    """
    One chart/series element. Option-mode points carry the underlying
    price and pricing breakdown; stock-mode points leave them as None.
    """
    time: datetime
    price: float
    volume: float
    stock_price: Optional[float] = None
    days_to_expiry: Optional[int] = None
    intrinsic: Optional[float] = None
    time_value: Optional[float] = None
    delta: Optional[float] = None


@dataclass(frozen=True)
class StrikeQuote:
    """A row of the strike ladder offered for a volatile day."""
    strike: int
    moneyness: Moneyness
    is_atm: bool
    call_profit: float
    put_profit: float
    call_entry: float
    call_target: float
    put_entry: float
    put_target: float


def bars_from_aggregates(items: Iterable[dict]) -> List[Bar]:
    """
    Normalise aggregate items ({t, o, h, l, c, v}, t in epoch milliseconds)
    into Bars. Malformed items are skipped with a warning.

    Raises:
        NoDataError: if no usable item remains
    """
    bars: List[Bar] = []
    for item in items or []:
        try:
            bars.append(
                Bar(
                    timestamp=pd.to_datetime(int(item["t"]), unit="ms", utc=True).to_pydatetime(),
                    open=float(item["o"]),
                    high=float(item["h"]),
                    low=float(item["l"]),
                    close=float(item["c"]),
                    volume=float(item.get("v") or 0),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Skipping malformed aggregate {item!r}: {exc}")

    if not bars:
        raise NoDataError()
    return bars


def bars_to_frame(bars: List[Bar]) -> pd.DataFrame:
    """DataFrame view of bars indexed by timestamp (empty frame for no bars)."""
    columns = ["open", "high", "low", "close", "volume"]
    if not bars:
        return pd.DataFrame(columns=columns)
    frame = pd.DataFrame(
        [[b.open, b.high, b.low, b.close, b.volume] for b in bars],
        columns=columns,
        index=pd.DatetimeIndex([b.timestamp for b in bars], name="timestamp"),
    )
    return frame

"""
Synthetic option pricing from the underlying alone.

There is no option-chain input. The price of a contract at any minute is a
heuristic:

    price = max(0.01, intrinsic + time_value)

    intrinsic   = max(0, S - K) for calls, max(0, K - S) for puts

    time_value, expiry day (days_to_expiry == 0):
        base  = max(0.02, 0.10 - 0.01 * |S - K|)
        decay = max(0.01, 1 - 2 * session_progress)
        time_value = base * decay
      The decay is twice the linear rate, so a same-day contract has lost
      nearly all of its time value by mid-session and stays at the floor
      through the close.

    time_value, days_to_expiry > 0:
        base = 0.15 * sqrt(days_to_expiry / 365)
        time_value = base * max(0.3, 1 - 0.02 * |S - K|)

This is not an option model: there is no volatility input, no put-call
parity and no Greeks beyond the crude delta proxy below. It exists to give
charts and trade estimates a plausible, always-positive price.
"""
import logging
import math
from dataclasses import asdict
from datetime import date
from typing import List, Optional

import pandas as pd

from config import (
    LADDER_PROFIT_MULTIPLIER,
    LADDER_TARGET_OFFSET,
    MULTI_DAY_BASE_TIME_VALUE,
    MULTI_DAY_DISTANCE_PENALTY,
    MULTI_DAY_MIN_DISTANCE_FACTOR,
    PRICE_FLOOR,
    STRIKE_LADDER_WIDTH,
    ZERO_DTE_BASE_TIME_VALUE,
    ZERO_DTE_DECAY_FLOOR,
    ZERO_DTE_DECAY_RATE,
    ZERO_DTE_DISTANCE_PENALTY,
    ZERO_DTE_MIN_TIME_VALUE,
)
from errors import InvalidParameterError
from expiry_calendar import ExpiryCalendar
from models import (
    OPTION_TYPES,
    Bar,
    OptionSelection,
    OptionType,
    PricePoint,
    StrikeQuote,
    VolatileDay,
    round_strike,
)
from session_filter import session_progress, to_market_time

logger = logging.getLogger(__name__)


class SyntheticOptionPricer:
    """Heuristic option price from (underlying, strike, type, days to expiry, session progress)."""

    @staticmethod
    def intrinsic(underlying_price: float, strike: float, option_type: OptionType) -> float:
        if option_type == "CALL":
            return max(0.0, underlying_price - strike)
        if option_type == "PUT":
            return max(0.0, strike - underlying_price)
        raise InvalidParameterError(f"option_type must be CALL or PUT, got {option_type!r}")

    @staticmethod
    def zero_dte_decay(progress: float) -> float:
        """Remaining share of same-day time value; non-increasing in progress."""
        progress = min(1.0, max(0.0, progress))
        return max(ZERO_DTE_DECAY_FLOOR, 1.0 - ZERO_DTE_DECAY_RATE * progress)

    @staticmethod
    def time_value(
        underlying_price: float,
        strike: float,
        days_to_expiry: int,
        progress: float = 0.0,
    ) -> float:
        if days_to_expiry < 0:
            raise InvalidParameterError("days_to_expiry must be >= 0")

        distance = abs(underlying_price - strike)
        if days_to_expiry == 0:
            base = max(ZERO_DTE_MIN_TIME_VALUE, ZERO_DTE_BASE_TIME_VALUE - distance * ZERO_DTE_DISTANCE_PENALTY)
            return base * SyntheticOptionPricer.zero_dte_decay(progress)

        base = math.sqrt(days_to_expiry / 365.0) * MULTI_DAY_BASE_TIME_VALUE
        return base * max(MULTI_DAY_MIN_DISTANCE_FACTOR, 1.0 - distance * MULTI_DAY_DISTANCE_PENALTY)

    @staticmethod
    def price(
        underlying_price: float,
        strike: float,
        option_type: OptionType,
        days_to_expiry: int,
        progress: float = 0.0,
    ) -> float:
        """
        Approximate option price, never below 0.01.

        Args:
            underlying_price: Underlying price at the moment being priced
            strike:           Whole-dollar strike
            option_type:      "CALL" or "PUT"
            days_to_expiry:   Calendar days left; 0 on expiry day
            progress:         Elapsed fraction of the session, used only when days_to_expiry == 0
        """
        intrinsic = SyntheticOptionPricer.intrinsic(underlying_price, strike, option_type)
        extrinsic = SyntheticOptionPricer.time_value(underlying_price, strike, days_to_expiry, progress)
        return max(PRICE_FLOOR, intrinsic + extrinsic)

    @staticmethod
    def delta_proxy(underlying_price: float, strike: float) -> float:
        """Crude sensitivity proxy in [0.1, 0.9], shrinking with distance from strike."""
        return max(0.1, min(0.9, 1.0 - abs(underlying_price - strike) / 10.0))


# ─────────────────────────────────────────────
# PRICE SERIES
# ─────────────────────────────────────────────

def build_stock_series(bars: List[Bar]) -> List[PricePoint]:
    """Underlying close per bar, stamped in exchange local time."""
    return [
        PricePoint(
            time=to_market_time(bar.timestamp).to_pydatetime(),
            price=bar.close,
            volume=bar.volume,
        )
        for bar in bars
    ]


def build_option_series(
    bars: List[Bar],
    selection: OptionSelection,
    view_date: Optional[date] = None,
) -> List[PricePoint]:
    """
    Price the selected option at every session bar of view_date
    (defaults to the selection's current view date).

    Raises:
        PastExpiryError / WeekendError: view_date is not a valid view date
    """
    view = view_date or selection.current_view_date
    ExpiryCalendar.validate(view, selection.expiry_date)
    dte = ExpiryCalendar.days_to_expiry(view, selection.expiry_date)

    points: List[PricePoint] = []
    for bar in bars:
        progress = session_progress(bar.timestamp)
        intrinsic = SyntheticOptionPricer.intrinsic(bar.close, selection.strike, selection.option_type)
        extrinsic = SyntheticOptionPricer.time_value(bar.close, selection.strike, dte, progress)
        points.append(
            PricePoint(
                time=to_market_time(bar.timestamp).to_pydatetime(),
                price=max(PRICE_FLOOR, intrinsic + extrinsic),
                volume=bar.volume,
                stock_price=bar.close,
                days_to_expiry=dte,
                intrinsic=intrinsic,
                time_value=extrinsic,
                delta=SyntheticOptionPricer.delta_proxy(bar.close, selection.strike),
            )
        )
    return points


def series_to_frame(points: List[PricePoint]) -> pd.DataFrame:
    """DataFrame indexed by local time, for charting."""
    if not points:
        return pd.DataFrame(columns=["price", "volume"])
    frame = pd.DataFrame([asdict(p) for p in points]).set_index("time")
    return frame.dropna(axis=1, how="all")


# ─────────────────────────────────────────────
# STRIKE LADDER
# ─────────────────────────────────────────────

def build_strike_ladder(day: VolatileDay, width: int = STRIKE_LADDER_WIDTH) -> List[StrikeQuote]:
    """
    Whole-dollar strikes around the day's open with session-open entry quotes
    for same-day contracts and a rough profit figure for the side that moved.
    """
    base = round_strike(day.open_price)
    call_profit = day.move_amount * LADDER_PROFIT_MULTIPLIER if day.direction == "UP" else 0.0
    put_profit = day.move_amount * LADDER_PROFIT_MULTIPLIER if day.direction == "DOWN" else 0.0

    ladder: List[StrikeQuote] = []
    for offset in range(-width, width + 1):
        strike = base + offset
        if strike <= 0:
            continue
        distance = abs(strike - day.open_price)
        if distance < 0.5:
            moneyness = "ATM"
        elif strike > day.open_price:
            moneyness = "OTM"
        else:
            moneyness = "ITM"

        entries = {
            option_type: SyntheticOptionPricer.price(day.open_price, strike, option_type, 0, 0.0)
            for option_type in OPTION_TYPES
        }
        ladder.append(
            StrikeQuote(
                strike=strike,
                moneyness=moneyness,
                is_atm=distance < 2,
                call_profit=call_profit,
                put_profit=put_profit,
                call_entry=entries["CALL"],
                call_target=entries["CALL"] + LADDER_TARGET_OFFSET,
                put_entry=entries["PUT"],
                put_target=entries["PUT"] + LADDER_TARGET_OFFSET,
            )
        )
    return ladder

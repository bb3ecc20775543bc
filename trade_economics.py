"""
Trade economics for detected patterns and tracked options.

Option prices here use the flat same-day entry model: entry is intrinsic plus
a 0.50 time value, and that time value bleeds 0.02 per minute held down to a
0.05 floor. A tracked option viewed before its expiry day is priced on both
legs with SyntheticOptionPricer instead. Profit figures are per 100-share contract.
"""
import logging
import numbers
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

import pandas as pd

from config import (
    CONTRACT_MULTIPLIER,
    ENTRY_TIME_VALUE,
    EXIT_TIME_VALUE_FLOOR,
    PRICE_FLOOR,
    TIME_DECAY_PER_MINUTE,
)
from errors import InvalidParameterError
from expiry_calendar import ExpiryCalendar
from models import Bar, OptionSelection, OptionType, Pattern
from option_pricing import SyntheticOptionPricer
from session_filter import session_progress, to_market_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeEstimate:
    strike: int
    option_type: OptionType
    contracts: int
    hold_minutes: int
    entry_option_price: float
    exit_option_price: float
    profit_per_contract: float
    total_cost: float
    total_profit: float
    percent_gain: float


@dataclass(frozen=True)
class PatternStats:
    total_patterns: int       # successful patterns
    win_rate: float           # % of all patterns that were successful
    avg_profit: float
    best_profit: float
    avg_hold_minutes: float
    call_share: float         # % CALLs among successful patterns


def clamp_contracts(value) -> int:
    """Whole positive contract count; anything else becomes 1."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 1
    if isinstance(value, numbers.Integral):
        count = int(value)
    elif float(value).is_integer():
        count = int(value)
    else:
        return 1
    return count if count >= 1 else 1


class TradeEconomics:
    """Entry cost, exit value and P&L of a synthetic same-day option trade."""

    @staticmethod
    def evaluate(
        entry_underlying: float,
        exit_underlying: float,
        strike: float,
        option_type: OptionType,
        hold_minutes: int,
        contracts=1,
        entry_time_value: float = ENTRY_TIME_VALUE,
    ) -> TradeEstimate:
        """
        Args:
            entry_underlying: Underlying price at entry
            exit_underlying:  Underlying price at exit
            strike:           Option strike
            option_type:      "CALL" or "PUT"
            hold_minutes:     Minutes between entry and exit
            contracts:        Clamped to a whole number >= 1
            entry_time_value: Time value paid at entry

        Returns:
            TradeEstimate; total_cost and total_profit scale linearly with contracts
        """
        if hold_minutes < 0:
            raise InvalidParameterError("hold_minutes must be >= 0")
        contracts = clamp_contracts(contracts)

        entry_intrinsic = SyntheticOptionPricer.intrinsic(entry_underlying, strike, option_type)
        exit_intrinsic = SyntheticOptionPricer.intrinsic(exit_underlying, strike, option_type)
        exit_time_value = max(EXIT_TIME_VALUE_FLOOR, entry_time_value - hold_minutes * TIME_DECAY_PER_MINUTE)

        entry_price = max(PRICE_FLOOR, entry_intrinsic + entry_time_value)
        exit_price = exit_intrinsic + exit_time_value
        return _estimate(strike, option_type, contracts, hold_minutes, entry_price, exit_price)

    @staticmethod
    def from_pattern(pattern: Pattern, contracts=1) -> TradeEstimate:
        """Trade the pattern's direction at the strike nearest its entry price."""
        return TradeEconomics.evaluate(
            entry_underlying=pattern.entry_price,
            exit_underlying=pattern.exit_price,
            strike=pattern.strike,
            option_type=pattern.direction,
            hold_minutes=pattern.hold_minutes,
            contracts=contracts,
        )

    @staticmethod
    def from_selection(
        selection: OptionSelection,
        entry_bar: Bar,
        exit_bar: Bar,
        contracts=1,
        view_date: Optional[date] = None,
    ) -> TradeEstimate:
        """
        Trade the tracked option between two bars of the viewed session.

        On expiry day the flat same-day entry model applies. On earlier days both
        legs are priced with SyntheticOptionPricer, matching the option chart.
        """
        hold_minutes = _minutes_between(entry_bar.timestamp, exit_bar.timestamp)
        if hold_minutes < 0:
            raise InvalidParameterError("exit bar precedes entry bar")

        view = view_date or selection.current_view_date
        dte = ExpiryCalendar.days_to_expiry(view, selection.expiry_date)
        if dte == 0:
            return TradeEconomics.evaluate(
                entry_underlying=entry_bar.close,
                exit_underlying=exit_bar.close,
                strike=selection.strike,
                option_type=selection.option_type,
                hold_minutes=hold_minutes,
                contracts=contracts,
            )

        entry_price, exit_price = (
            SyntheticOptionPricer.price(
                bar.close, selection.strike, selection.option_type, dte, session_progress(bar.timestamp)
            )
            for bar in (entry_bar, exit_bar)
        )
        return _estimate(
            selection.strike, selection.option_type, clamp_contracts(contracts),
            hold_minutes, entry_price, exit_price,
        )


def _estimate(strike, option_type, contracts, hold_minutes, entry_price, exit_price) -> TradeEstimate:
    profit_per_contract = (exit_price - entry_price) * CONTRACT_MULTIPLIER
    total_cost = entry_price * contracts * CONTRACT_MULTIPLIER
    total_profit = profit_per_contract * contracts

    return TradeEstimate(
        strike=int(strike),
        option_type=option_type,
        contracts=contracts,
        hold_minutes=hold_minutes,
        entry_option_price=entry_price,
        exit_option_price=exit_price,
        profit_per_contract=profit_per_contract,
        total_cost=total_cost,
        total_profit=total_profit,
        percent_gain=total_profit / total_cost * 100,
    )


def _minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def summarize_patterns(patterns: List[Pattern]) -> PatternStats:
    """Headline statistics; averages cover successful patterns only."""
    winners = [p for p in patterns if p.success]
    if not winners:
        return PatternStats(
            total_patterns=0,
            win_rate=0.0,
            avg_profit=0.0,
            best_profit=0.0,
            avg_hold_minutes=0.0,
            call_share=50.0,
        )

    return PatternStats(
        total_patterns=len(winners),
        win_rate=len(winners) / len(patterns) * 100,
        avg_profit=sum(p.estimated_profit for p in winners) / len(winners),
        best_profit=max(p.estimated_profit for p in winners),
        avg_hold_minutes=sum(p.hold_minutes for p in winners) / len(winners),
        call_share=sum(1 for p in winners if p.direction == "CALL") / len(winners) * 100,
    )


def patterns_to_frame(patterns: List[Pattern], contracts=1) -> pd.DataFrame:
    """Successful patterns with their trade economics, one row per pattern."""
    rows = []
    for pattern in patterns:
        if not pattern.success:
            continue
        trade = TradeEconomics.from_pattern(pattern, contracts)
        rows.append({
            "entry_time": to_market_time(pattern.entry_time),
            "exit_time": to_market_time(pattern.exit_time),
            "direction": pattern.direction,
            "strike": trade.strike,
            "entry_price": pattern.entry_price,
            "exit_price": pattern.exit_price,
            "stock_move": pattern.stock_move,
            "move_percent": pattern.move_percent,
            "hold_minutes": pattern.hold_minutes,
            "estimated_profit": pattern.estimated_profit,
            "entry_option_price": trade.entry_option_price,
            "exit_option_price": trade.exit_option_price,
            "total_cost": trade.total_cost,
            "total_profit": trade.total_profit,
            "percent_gain": trade.percent_gain,
        })
    return pd.DataFrame(rows)

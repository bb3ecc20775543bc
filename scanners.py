"""
Daily and intraday scanners.

Both scanners are pure functions of (bars, parameters): input bars are never
reordered, only the returned candidate list is sorted, and an empty result is
an empty list rather than an error.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np

from config import (
    DEFAULT_MAX_HOLD_MINUTES,
    DEFAULT_MIN_ESTIMATED_PROFIT,
    DEFAULT_MIN_STOCK_MOVE,
    DEFAULT_MIN_VOLUME,
    LEVERAGE_FALLBACK,
    LEVERAGE_TIERS,
    PRICE_TOLERANCE,
    WARMUP_BARS,
)
from errors import InvalidParameterError
from models import Bar, DirectionFilter, Pattern, VolatileDay
from session_filter import MarketSessionFilter, session_date

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# DAILY MOVE FILTERS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class PercentRangeFilter:
    """Keep days whose move percent lies in [low, high] (the "0.10-0.50" encoding)."""
    low: float
    high: float

    def __post_init__(self):
        if self.low < 0 or self.high < self.low:
            raise InvalidParameterError(
                f"Invalid move range {self.low}-{self.high}: need 0 <= low <= high"
            )

    @classmethod
    def from_string(cls, text: str) -> "PercentRangeFilter":
        """Parse a range such as "0.10-0.50"."""
        try:
            low, high = (float(part) for part in str(text).split("-"))
        except ValueError:
            raise InvalidParameterError(f"Cannot parse move range {text!r}") from None
        return cls(low, high)

    def matches(self, move_percent: float, move_amount: float) -> bool:
        return self.low <= move_percent <= self.high


@dataclass(frozen=True)
class MinimumMoveFilter:
    """Keep days moving at least min_move_percent OR at least min_move_amount dollars."""
    min_move_percent: float
    min_move_amount: Optional[float] = None

    def __post_init__(self):
        if self.min_move_percent < 0:
            raise InvalidParameterError("min_move_percent must be >= 0")
        if self.min_move_amount is not None and self.min_move_amount < 0:
            raise InvalidParameterError("min_move_amount must be >= 0")

    def matches(self, move_percent: float, move_amount: float) -> bool:
        if move_percent >= self.min_move_percent:
            return True
        return self.min_move_amount is not None and move_amount >= self.min_move_amount


MoveFilter = Union[PercentRangeFilter, MinimumMoveFilter]


def normalize_direction(direction: str) -> DirectionFilter:
    value = str(direction).upper()
    if value not in ("UP", "DOWN", "BOTH"):
        raise InvalidParameterError(f"Unknown direction filter {direction!r}")
    return value


class DailyMoveScanner:
    """Find days whose open-to-close move passes magnitude and direction filters."""

    @staticmethod
    def measure(bar: Bar) -> VolatileDay:
        """Open-to-close move of one daily bar (never against the prior close)."""
        move_amount = abs(bar.close - bar.open)
        return VolatileDay(
            date=session_date(bar.timestamp),
            move_percent=move_amount / bar.open * 100,
            move_amount=move_amount,
            direction="UP" if bar.close > bar.open else "DOWN",
            volume=bar.volume,
            open_price=bar.open,
            close_price=bar.close,
        )

    @staticmethod
    def scan(
        bars: List[Bar],
        move_filter: MoveFilter,
        direction: str = "BOTH",
    ) -> List[VolatileDay]:
        """
        Scan one-bar-per-day data.

        Args:
            bars:        Daily bars, oldest first
            move_filter: PercentRangeFilter or MinimumMoveFilter
            direction:   "UP", "DOWN" or "BOTH"

        Returns:
            Matching days sorted by move_percent, largest first
        """
        wanted = normalize_direction(direction)
        days: List[VolatileDay] = []

        for bar in bars:
            if bar.open <= 0:
                logger.warning(f"Skipping daily bar with non-positive open at {bar.timestamp}")
                continue
            day = DailyMoveScanner.measure(bar)
            if not move_filter.matches(day.move_percent, day.move_amount):
                continue
            if wanted != "BOTH" and day.direction != wanted:
                continue
            days.append(day)

        days.sort(key=lambda d: d.move_percent, reverse=True)
        logger.info(f"Daily scan: {len(days)} of {len(bars)} days matched")
        return days


# ─────────────────────────────────────────────
# INTRADAY PATTERNS
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class LeverageTier:
    """Moves strictly below upper_percent get this multiplier."""
    upper_percent: float
    multiplier: float


@dataclass(frozen=True)
class LeverageSchedule:
    """
    Step function mapping the underlying's move percent to an assumed option
    amplification factor. Wider moves never get a lower multiplier.
    """
    tiers: Tuple[LeverageTier, ...]
    fallback: float

    def __post_init__(self):
        bounds = [t.upper_percent for t in self.tiers]
        if any(b <= a for a, b in zip(bounds, bounds[1:])):
            raise InvalidParameterError("Leverage tier bounds must be strictly increasing")
        multipliers = [t.multiplier for t in self.tiers] + [self.fallback]
        if any(m <= 0 for m in multipliers):
            raise InvalidParameterError("Leverage multipliers must be positive")
        if any(b < a for a, b in zip(multipliers, multipliers[1:])):
            raise InvalidParameterError("Leverage multipliers must not decrease with move size")

    @classmethod
    def default(cls) -> "LeverageSchedule":
        return cls(
            tiers=tuple(LeverageTier(bound, mult) for bound, mult in LEVERAGE_TIERS),
            fallback=LEVERAGE_FALLBACK,
        )

    def multiplier_for(self, move_percent: float) -> float:
        for tier in self.tiers:
            if move_percent < tier.upper_percent:
                return tier.multiplier
        return self.fallback


@dataclass(frozen=True)
class PatternScanParams:
    min_stock_move: float = DEFAULT_MIN_STOCK_MOVE
    max_hold_minutes: int = DEFAULT_MAX_HOLD_MINUTES
    min_volume: Optional[float] = DEFAULT_MIN_VOLUME
    min_estimated_profit: float = DEFAULT_MIN_ESTIMATED_PROFIT
    leverage: LeverageSchedule = field(default_factory=LeverageSchedule.default)
    warmup_bars: int = WARMUP_BARS

    def validate(self) -> None:
        if not isinstance(self.max_hold_minutes, int) or self.max_hold_minutes < 1:
            raise InvalidParameterError(
                f"max_hold_minutes must be a positive integer, got {self.max_hold_minutes!r}"
            )
        if self.min_stock_move <= 0:
            raise InvalidParameterError("min_stock_move must be positive")
        if self.min_volume is not None and self.min_volume < 0:
            raise InvalidParameterError("min_volume must be >= 0")
        if self.warmup_bars < 0:
            raise InvalidParameterError("warmup_bars must be >= 0")


class IntradayPatternScanner:
    """
    Find entry/exit minute pairs whose close-to-close move reaches a dollar
    threshold within a bounded hold.

    For each entry the earliest qualifying exit is taken; larger moves later in
    the window are never considered. Overlapping patterns from neighbouring
    entries are kept.
    """

    @staticmethod
    def scan(bars: List[Bar], params: Optional[PatternScanParams] = None) -> List[Pattern]:
        """
        Scan one session of minute bars (already session-filtered).

        Returns:
            Patterns sorted by estimated_profit, largest first
        """
        params = params or PatternScanParams()
        params.validate()

        n = len(bars)
        hold = params.max_hold_minutes
        # entries too close to the open (warm-up) or the close are skipped
        entry_indices = range(params.warmup_bars, n - hold)
        if not entry_indices:
            return []

        closes = np.array([b.close for b in bars], dtype=float)
        threshold = params.min_stock_move - PRICE_TOLERANCE
        patterns: List[Pattern] = []

        for i in entry_indices:
            entry = bars[i]
            if params.min_volume is not None and entry.volume < params.min_volume:
                continue
            if entry.close <= 0:
                continue

            last = min(i + hold, n - 1)
            moves = np.abs(closes[i + 1:last + 1] - closes[i])
            hits = np.flatnonzero(moves >= threshold)
            if hits.size == 0:
                continue

            j = i + 1 + int(hits[0])
            patterns.append(IntradayPatternScanner._build_pattern(entry, bars[j], j - i, params))

        patterns.sort(key=lambda p: p.estimated_profit, reverse=True)
        logger.debug(f"Intraday scan: {len(patterns)} patterns from {n} bars")
        return patterns

    @staticmethod
    def scan_sessions(
        bars: List[Bar], params: Optional[PatternScanParams] = None
    ) -> List[Pattern]:
        """
        Scan minute bars spanning several days. Each session is scanned on its
        own so no pattern crosses an overnight gap.
        """
        params = params or PatternScanParams()
        params.validate()

        patterns: List[Pattern] = []
        sessions = MarketSessionFilter.group_by_session(bars)
        for day, session_bars in sessions.items():
            found = IntradayPatternScanner.scan(session_bars, params)
            logger.debug(f"{day}: {len(found)} patterns")
            patterns.extend(found)

        patterns.sort(key=lambda p: p.estimated_profit, reverse=True)
        logger.info(f"Pattern scan: {len(patterns)} patterns across {len(sessions)} sessions")
        return patterns

    @staticmethod
    def _build_pattern(entry: Bar, exit_bar: Bar, hold_minutes: int, params: PatternScanParams) -> Pattern:
        stock_move = abs(exit_bar.close - entry.close)
        move_percent = stock_move / entry.close * 100
        leverage = params.leverage.multiplier_for(move_percent)
        estimated_profit = stock_move * leverage
        return Pattern(
            entry_time=entry.timestamp,
            exit_time=exit_bar.timestamp,
            entry_price=entry.close,
            exit_price=exit_bar.close,
            stock_move=stock_move,
            move_percent=move_percent,
            hold_minutes=hold_minutes,
            direction="CALL" if exit_bar.close > entry.close else "PUT",
            leverage=leverage,
            estimated_profit=estimated_profit,
            volume=entry.volume,
            success=estimated_profit >= params.min_estimated_profit,
        )

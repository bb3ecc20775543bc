"""
Regular trading session helpers.

All session arithmetic happens in exchange local time (America/New_York),
so DST transitions are handled by the timezone database, not by offsets.
"""
import logging
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, List

import pandas as pd

from config import (
    MARKET_TIMEZONE,
    SESSION_CLOSE_MINUTE,
    SESSION_LENGTH_MINUTES,
    SESSION_OPEN_MINUTE,
)
from models import Bar

logger = logging.getLogger(__name__)


def to_market_time(ts: datetime) -> pd.Timestamp:
    """Convert an instant to exchange local time. Naive values are taken as UTC."""
    stamp = pd.Timestamp(ts)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return stamp.tz_convert(MARKET_TIMEZONE)


def session_date(ts: datetime) -> date:
    """Calendar date of the instant in exchange local time."""
    return to_market_time(ts).date()


def is_in_session(ts: datetime) -> bool:
    local = to_market_time(ts)
    minute = local.hour * 60 + local.minute
    return SESSION_OPEN_MINUTE <= minute < SESSION_CLOSE_MINUTE


def session_progress(ts: datetime) -> float:
    """
    Fraction of the regular session elapsed at ts, clamped to [0, 1].
    09:30 -> 0.0, 12:45 -> 0.5, 16:00 and later -> 1.0.
    """
    local = to_market_time(ts)
    minutes = local.hour * 60 + local.minute + local.second / 60.0
    elapsed = (minutes - SESSION_OPEN_MINUTE) / SESSION_LENGTH_MINUTES
    return min(1.0, max(0.0, elapsed))


class MarketSessionFilter:
    """Restrict bar sequences to the regular session [09:30, 16:00) local time."""

    @staticmethod
    def filter(bars: List[Bar]) -> List[Bar]:
        """
        Keep bars whose local time of day falls in the regular session.

        Ordering is preserved; bars stamped exactly 16:00 are dropped.
        Empty input gives empty output.
        """
        if not bars:
            return []

        index = pd.DatetimeIndex([b.timestamp for b in bars])
        if index.tz is None:
            index = index.tz_localize("UTC")
        local = index.tz_convert(MARKET_TIMEZONE)
        minutes = local.hour * 60 + local.minute
        mask = (minutes >= SESSION_OPEN_MINUTE) & (minutes < SESSION_CLOSE_MINUTE)

        kept = [bar for bar, keep in zip(bars, mask) if keep]
        logger.debug(f"Session filter kept {len(kept)} of {len(bars)} bars")
        return kept

    @staticmethod
    def group_by_session(bars: List[Bar]) -> Dict[date, List[Bar]]:
        """
        Split bars into per-session lists keyed by local date, in input order.
        Bars outside the regular session are dropped.
        """
        sessions: Dict[date, List[Bar]] = OrderedDict()
        for bar in MarketSessionFilter.filter(bars):
            sessions.setdefault(session_date(bar.timestamp), []).append(bar)
        return sessions

"""
Shared bar factories. 2024-03-05 is a Tuesday in EST, so 14:30 UTC is the
09:30 New York open.
"""
from datetime import datetime, timedelta, timezone

import pytest

from models import Bar

SESSION_OPEN_UTC = datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc)


def make_bar(timestamp, close, open_=None, volume=5000.0):
    open_ = close if open_ is None else open_
    return Bar(
        timestamp=timestamp,
        open=open_,
        high=max(open_, close),
        low=min(open_, close),
        close=close,
        volume=volume,
    )


def make_minute_bars(closes, start=SESSION_OPEN_UTC, volume=5000.0):
    """One bar per minute from start, one per close."""
    volumes = volume if isinstance(volume, (list, tuple)) else [volume] * len(closes)
    return [
        make_bar(start + timedelta(minutes=i), close, volume=vol)
        for i, (close, vol) in enumerate(zip(closes, volumes))
    ]


def make_daily_bar(day, open_, close, volume=1_000_000.0):
    # daily aggregates are stamped at local midnight, 05:00 UTC in winter
    ts = datetime(day.year, day.month, day.day, 5, 0, tzinfo=timezone.utc)
    return make_bar(ts, close, open_=open_, volume=volume)


@pytest.fixture
def minute_bars():
    return make_minute_bars


@pytest.fixture
def daily_bar():
    return make_daily_bar


@pytest.fixture
def session_open():
    return SESSION_OPEN_UTC

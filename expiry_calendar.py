"""
Expiry-aware calendar navigation for a tracked option.

Trading days are Monday to Friday; exchange holidays are not modelled, a
holiday simply loads no bars.
"""
from datetime import date, datetime, timedelta
from typing import Union

import pandas as pd

from errors import InvalidParameterError, PastExpiryError, WeekendError

DateLike = Union[date, datetime, str]


def as_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


class ExpiryCalendar:
    """Valid view dates for an option: weekdays on or before expiry."""

    @staticmethod
    def is_trading_day(day: DateLike) -> bool:
        return as_date(day).weekday() < 5

    @staticmethod
    def advance(day: DateLike, direction: int) -> date:
        """
        Move one calendar day forward (+1) or back (-1). A weekend landing
        snaps to the next Monday going forward, or the previous Friday going back.
        """
        if direction not in (1, -1):
            raise InvalidParameterError(f"direction must be +1 or -1, got {direction!r}")
        step = timedelta(days=direction)
        target = as_date(day) + step
        while not ExpiryCalendar.is_trading_day(target):
            target += step
        return target

    @staticmethod
    def validate(view_date: DateLike, expiry_date: DateLike) -> None:
        """
        Raises:
            PastExpiryError: view_date is after expiry_date
            WeekendError:    view_date is a Saturday or Sunday
        """
        view, expiry = as_date(view_date), as_date(expiry_date)
        if view > expiry:
            raise PastExpiryError(view, expiry)
        if not ExpiryCalendar.is_trading_day(view):
            raise WeekendError(view)

    @staticmethod
    def step(view_date: DateLike, direction: int, expiry_date: DateLike) -> date:
        """advance() followed by validate(); the caller keeps its old date on error."""
        target = ExpiryCalendar.advance(view_date, direction)
        ExpiryCalendar.validate(target, expiry_date)
        return target

    @staticmethod
    def days_to_expiry(view_date: DateLike, expiry_date: DateLike) -> int:
        """Whole calendar days from view to expiry; 0 on expiry day and after."""
        return max(0, (as_date(expiry_date) - as_date(view_date)).days)

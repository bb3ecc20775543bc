"""
Error taxonomy for the 0DTE Options Explorer.

Market data errors surface to the caller and are never retried here.
Navigation errors are user-facing warnings: the attempted move is rejected
and the previous view date is kept.
"""


class ExplorerError(Exception):
    """Base class for all explorer errors."""


class MarketDataError(ExplorerError):
    """The market data service could not be reached or answered with an error."""


class NoDataError(MarketDataError):
    """Upstream answered but carried no usable bars."""

    def __init__(self, message: str = "No data available"):
        super().__init__(message)


class InvalidParameterError(ExplorerError, ValueError):
    """A scan or pricing parameter is out of range; raised before any work is done."""


class NavigationError(ExplorerError):
    """A view-date change was rejected."""


class PastExpiryError(NavigationError):
    def __init__(self, view_date, expiry_date):
        self.view_date = view_date
        self.expiry_date = expiry_date
        super().__init__(
            f"Cannot view {view_date.isoformat()}: option expired on {expiry_date.isoformat()}"
        )


class WeekendError(NavigationError):
    def __init__(self, view_date):
        self.view_date = view_date
        super().__init__(f"{view_date.isoformat()} is a weekend - no market data")

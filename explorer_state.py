"""
Explicit view state of the explorer and its transitions.

Every transition is a pure function returning a new ExplorerState; nothing
here knows about Streamlit. Rejected navigation returns the unchanged state
plus a warning message for the user.
"""
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from errors import InvalidParameterError, NavigationError
from expiry_calendar import DateLike, ExpiryCalendar, as_date
from models import ChartMode, OPTION_TYPES, OptionSelection, OptionType, VolatileDay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplorerState:
    mode: ChartMode = "STOCK"
    view_date: Optional[date] = None
    selection: Optional[OptionSelection] = None
    volatile_day: Optional[VolatileDay] = None


@dataclass(frozen=True)
class Transition:
    state: ExplorerState
    warning: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.warning is None


def select_volatile_day(state: ExplorerState, day: VolatileDay) -> ExplorerState:
    """Open a scanned day for analysis; any tracked option is dropped."""
    return ExplorerState(mode="STOCK", view_date=day.date, selection=None, volatile_day=day)


def select_option(
    state: ExplorerState, strike: int, option_type: OptionType, expiry_date: DateLike
) -> ExplorerState:
    """Track a same-day option expiring on expiry_date, starting the view on expiry day."""
    if option_type not in OPTION_TYPES:
        raise InvalidParameterError(f"option_type must be CALL or PUT, got {option_type!r}")
    expiry = as_date(expiry_date)
    ExpiryCalendar.validate(expiry, expiry)

    selection = OptionSelection(
        strike=int(strike),
        option_type=option_type,
        expiry_date=expiry,
        current_view_date=expiry,
    )
    return replace(state, selection=selection, view_date=expiry)


def set_mode(state: ExplorerState, mode: str) -> ExplorerState:
    value = str(mode).upper()
    if value not in ("STOCK", "OPTION"):
        raise InvalidParameterError(f"Unknown chart mode {mode!r}")
    if value == "OPTION" and state.selection is None:
        raise InvalidParameterError("Select an option before switching to option prices")
    return replace(state, mode=value)


def navigate_day(state: ExplorerState, direction: int) -> Transition:
    """Step the view one trading day back (-1) or forward (+1) within the option's life."""
    if state.selection is None or state.view_date is None:
        return Transition(state, "Select an option to move between days")

    try:
        target = ExpiryCalendar.step(state.view_date, direction, state.selection.expiry_date)
    except NavigationError as exc:
        logger.info(f"Navigation rejected: {exc}")
        return Transition(state, str(exc))

    return Transition(_with_view_date(state, target))


def jump_to_date(state: ExplorerState, target: DateLike) -> Transition:
    """Direct date entry, held to the same rules as day stepping."""
    if state.selection is None:
        return Transition(state, "Select an option to move between days")

    day = as_date(target)
    try:
        ExpiryCalendar.validate(day, state.selection.expiry_date)
    except NavigationError as exc:
        logger.info(f"Navigation rejected: {exc}")
        return Transition(state, str(exc))

    return Transition(_with_view_date(state, day))


def _with_view_date(state: ExplorerState, day: date) -> ExplorerState:
    return replace(state, view_date=day, selection=state.selection.with_view_date(day))

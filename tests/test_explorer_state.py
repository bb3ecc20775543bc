"""
Explorer state transition tests: selection, mode switching and day navigation.
"""
from datetime import date

import pytest

from errors import InvalidParameterError
from explorer_state import (
    ExplorerState,
    jump_to_date,
    navigate_day,
    select_option,
    select_volatile_day,
    set_mode,
)
from models import VolatileDay

FRIDAY = date(2024, 3, 8)
MONDAY = date(2024, 3, 11)
TUESDAY = date(2024, 3, 12)


def volatile_day(day=TUESDAY):
    return VolatileDay(
        date=day,
        move_percent=1.5,
        move_amount=1.5,
        direction="UP",
        volume=1e6,
        open_price=100.0,
        close_price=101.5,
    )


@pytest.fixture
def tracking():
    """Tracking a CALL expiring Tuesday, viewed on expiry day."""
    state = select_volatile_day(ExplorerState(), volatile_day())
    return select_option(state, 100, "CALL", TUESDAY)


class TestSelection:
    def test_select_volatile_day(self):
        state = select_volatile_day(ExplorerState(), volatile_day())
        assert state.mode == "STOCK"
        assert state.view_date == TUESDAY
        assert state.selection is None

    def test_select_day_drops_selection(self, tracking):
        state = select_volatile_day(set_mode(tracking, "OPTION"), volatile_day(FRIDAY))
        assert state.selection is None
        assert state.mode == "STOCK"
        assert state.view_date == FRIDAY

    def test_select_option_views_expiry(self, tracking):
        assert tracking.selection.strike == 100
        assert tracking.selection.expiry_date == TUESDAY
        assert tracking.selection.current_view_date == TUESDAY
        assert tracking.view_date == TUESDAY
        assert tracking.selection.label == "CALL $100 Strike"

    def test_select_option_bad_type(self):
        with pytest.raises(InvalidParameterError):
            select_option(ExplorerState(), 100, "BOTH", TUESDAY)


class TestSetMode:
    def test_option_mode(self, tracking):
        assert set_mode(tracking, "option").mode == "OPTION"

    def test_option_mode_needs_selection(self):
        with pytest.raises(InvalidParameterError):
            set_mode(ExplorerState(), "OPTION")

    def test_unknown_mode(self, tracking):
        with pytest.raises(InvalidParameterError):
            set_mode(tracking, "CHART")


class TestNavigateDay:
    def test_forward_past_expiry_rejected(self, tracking):
        transition = navigate_day(tracking, 1)
        assert not transition.accepted
        assert transition.state == tracking
        assert "expired" in transition.warning

    def test_backward_over_weekend(self, tracking):
        monday = navigate_day(tracking, -1)
        assert monday.accepted
        assert monday.state.view_date == MONDAY

        friday = navigate_day(monday.state, -1)
        assert friday.state.view_date == FRIDAY
        assert friday.state.selection.current_view_date == FRIDAY
        assert friday.state.selection.expiry_date == TUESDAY

    def test_forward_over_weekend(self, tracking):
        friday = jump_to_date(tracking, FRIDAY).state
        assert navigate_day(friday, 1).state.view_date == MONDAY

    def test_mode_kept(self, tracking):
        state = set_mode(tracking, "OPTION")
        assert navigate_day(state, -1).state.mode == "OPTION"

    def test_without_selection(self):
        state = select_volatile_day(ExplorerState(), volatile_day())
        transition = navigate_day(state, -1)
        assert not transition.accepted
        assert transition.state == state


class TestJumpToDate:
    def test_valid_date(self, tracking):
        transition = jump_to_date(tracking, "2024-03-06")
        assert transition.accepted
        assert transition.state.view_date == date(2024, 3, 6)

    def test_weekend_rejected(self, tracking):
        transition = jump_to_date(tracking, date(2024, 3, 9))
        assert not transition.accepted
        assert transition.state.view_date == TUESDAY
        assert "weekend" in transition.warning

    def test_after_expiry_rejected(self, tracking):
        transition = jump_to_date(tracking, date(2024, 3, 13))
        assert not transition.accepted
        assert transition.state == tracking

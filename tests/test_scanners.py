"""
Daily move scanner and intraday pattern scanner tests.
"""
from datetime import date, datetime, timezone

import pytest

from errors import InvalidParameterError
from scanners import (
    DailyMoveScanner,
    IntradayPatternScanner,
    LeverageSchedule,
    LeverageTier,
    MinimumMoveFilter,
    PatternScanParams,
    PercentRangeFilter,
)


# ===================================================================
#  Daily filters
# ===================================================================

class TestPercentRangeFilter:
    def test_from_string(self):
        f = PercentRangeFilter.from_string("0.10-0.50")
        assert (f.low, f.high) == (0.10, 0.50)

    def test_bounds_inclusive(self):
        f = PercentRangeFilter(0.10, 0.50)
        assert f.matches(0.10, 0.0)
        assert f.matches(0.50, 0.0)
        assert not f.matches(0.51, 0.0)

    @pytest.mark.parametrize("text", ["abc", "0.5", "1-2-3", ""])
    def test_unparseable(self, text):
        with pytest.raises(InvalidParameterError):
            PercentRangeFilter.from_string(text)

    def test_inverted_range(self):
        with pytest.raises(InvalidParameterError):
            PercentRangeFilter(0.5, 0.1)


class TestMinimumMoveFilter:
    def test_percent_or_amount(self):
        f = MinimumMoveFilter(min_move_percent=2.0, min_move_amount=5.0)
        assert f.matches(2.5, 1.0)
        assert f.matches(0.5, 6.0)
        assert not f.matches(1.0, 1.0)

    def test_amount_optional(self):
        f = MinimumMoveFilter(min_move_percent=2.0)
        assert not f.matches(1.0, 100.0)

    def test_negative(self):
        with pytest.raises(InvalidParameterError):
            MinimumMoveFilter(min_move_percent=-1.0)


# ===================================================================
#  DailyMoveScanner
# ===================================================================

class TestDailyMoveScanner:
    def test_up_day_included(self, daily_bar):
        bars = [daily_bar(date(2024, 3, 5), 100.0, 102.0)]
        days = DailyMoveScanner.scan(bars, MinimumMoveFilter(1.0), "BOTH")

        assert len(days) == 1
        assert days[0].move_percent == pytest.approx(2.0)
        assert days[0].move_amount == pytest.approx(2.0)
        assert days[0].direction == "UP"
        assert days[0].date == date(2024, 3, 5)

    def test_direction_filter(self, daily_bar):
        bars = [
            daily_bar(date(2024, 3, 4), 100.0, 103.0),
            daily_bar(date(2024, 3, 5), 100.0, 97.0),
        ]
        up = DailyMoveScanner.scan(bars, MinimumMoveFilter(1.0), "UP")
        down = DailyMoveScanner.scan(bars, MinimumMoveFilter(1.0), "down")

        assert [d.date for d in up] == [date(2024, 3, 4)]
        assert [d.date for d in down] == [date(2024, 3, 5)]

    def test_flat_day_is_down(self, daily_bar):
        day = DailyMoveScanner.measure(daily_bar(date(2024, 3, 5), 100.0, 100.0))
        assert day.direction == "DOWN"
        assert day.move_percent == 0.0

    def test_sorted_by_move_percent(self, daily_bar):
        bars = [
            daily_bar(date(2024, 3, 4), 100.0, 100.2),
            daily_bar(date(2024, 3, 5), 100.0, 100.45),
            daily_bar(date(2024, 3, 6), 100.0, 99.7),
        ]
        days = DailyMoveScanner.scan(bars, PercentRangeFilter(0.10, 0.50))
        assert [d.date for d in days] == [date(2024, 3, 5), date(2024, 3, 6), date(2024, 3, 4)]

    def test_input_not_mutated(self, daily_bar):
        bars = [
            daily_bar(date(2024, 3, 4), 100.0, 100.2),
            daily_bar(date(2024, 3, 5), 100.0, 100.45),
        ]
        snapshot = list(bars)
        DailyMoveScanner.scan(bars, PercentRangeFilter(0.0, 1.0))
        assert bars == snapshot

    def test_outside_range(self, daily_bar):
        bars = [daily_bar(date(2024, 3, 5), 100.0, 102.0)]
        assert DailyMoveScanner.scan(bars, PercentRangeFilter(0.10, 0.50)) == []

    def test_non_positive_open_skipped(self, daily_bar):
        bars = [daily_bar(date(2024, 3, 5), 0.0, 5.0)]
        assert DailyMoveScanner.scan(bars, MinimumMoveFilter(0.0)) == []

    def test_empty(self):
        assert DailyMoveScanner.scan([], MinimumMoveFilter(1.0)) == []

    def test_unknown_direction(self, daily_bar):
        with pytest.raises(InvalidParameterError):
            DailyMoveScanner.scan([], MinimumMoveFilter(1.0), "SIDEWAYS")


# ===================================================================
#  Leverage
# ===================================================================

class TestLeverageSchedule:
    @pytest.mark.parametrize("move_percent,expected", [
        (0.05, 8.0),
        (0.1, 15.0),
        (0.15, 15.0),
        (0.2, 20.0),
        (0.49, 20.0),
        (0.5, 25.0),
        (3.0, 25.0),
    ])
    def test_default_tiers(self, move_percent, expected):
        assert LeverageSchedule.default().multiplier_for(move_percent) == expected

    def test_non_decreasing(self):
        schedule = LeverageSchedule.default()
        values = [schedule.multiplier_for(p / 100) for p in range(0, 200)]
        assert values == sorted(values)

    def test_decreasing_multipliers_rejected(self):
        with pytest.raises(InvalidParameterError):
            LeverageSchedule(tiers=(LeverageTier(0.1, 20.0), LeverageTier(0.2, 10.0)), fallback=30.0)

    def test_unordered_bounds_rejected(self):
        with pytest.raises(InvalidParameterError):
            LeverageSchedule(tiers=(LeverageTier(0.2, 8.0), LeverageTier(0.1, 15.0)), fallback=25.0)

    def test_fallback_below_last_tier_rejected(self):
        with pytest.raises(InvalidParameterError):
            LeverageSchedule(tiers=(LeverageTier(0.1, 8.0),), fallback=5.0)


# ===================================================================
#  IntradayPatternScanner
# ===================================================================

class TestPatternScanParams:
    @pytest.mark.parametrize("hold", [0, -1, 2.5])
    def test_bad_hold(self, hold):
        with pytest.raises(InvalidParameterError):
            PatternScanParams(max_hold_minutes=hold).validate()

    def test_bad_move(self):
        with pytest.raises(InvalidParameterError):
            PatternScanParams(min_stock_move=0).validate()

    def test_scan_validates_first(self):
        with pytest.raises(InvalidParameterError):
            IntradayPatternScanner.scan([], PatternScanParams(max_hold_minutes=0))


class TestIntradayPatternScanner:
    def test_first_qualifying_move_after_warmup(self, minute_bars):
        bars = minute_bars([100.00] * 5 + [100.12] * 20)
        params = PatternScanParams(min_stock_move=0.10, warmup_bars=4)

        patterns = IntradayPatternScanner.scan(bars, params)

        assert len(patterns) == 1
        p = patterns[0]
        assert p.entry_time == bars[4].timestamp
        assert p.exit_time == bars[5].timestamp
        assert p.hold_minutes == 1
        assert p.direction == "CALL"
        assert p.stock_move == pytest.approx(0.12)
        assert p.move_percent == pytest.approx(0.12)
        assert p.leverage == 15.0
        assert p.estimated_profit == pytest.approx(1.8)
        assert p.success is False

    def test_default_warmup_skips_early_entries(self, minute_bars):
        bars = minute_bars([100.00] * 5 + [100.12] * 20)
        assert IntradayPatternScanner.scan(bars, PatternScanParams(min_stock_move=0.10)) == []

    def test_earliest_exit_wins(self, minute_bars):
        bars = minute_bars([100.0] * 6 + [100.15, 101.0] + [101.0] * 20)
        patterns = IntradayPatternScanner.scan(bars, PatternScanParams(min_stock_move=0.10))

        from_entry = [p for p in patterns if p.entry_time == bars[5].timestamp]
        assert len(from_entry) == 1
        assert from_entry[0].exit_time == bars[6].timestamp
        assert from_entry[0].stock_move == pytest.approx(0.15)

    def test_overlapping_patterns_kept(self, minute_bars):
        bars = minute_bars([100.0] * 6 + [100.15, 101.0] + [101.0] * 20)
        patterns = IntradayPatternScanner.scan(bars, PatternScanParams(min_stock_move=0.10))
        entries = {p.entry_time for p in patterns}
        assert bars[5].timestamp in entries
        assert bars[6].timestamp in entries

    def test_put_pattern_success(self, minute_bars):
        bars = minute_bars([100.0] * 6 + [99.4] * 20)
        patterns = IntradayPatternScanner.scan(bars, PatternScanParams(min_stock_move=0.10))

        assert len(patterns) == 1
        p = patterns[0]
        assert p.direction == "PUT"
        assert p.leverage == 25.0
        assert p.estimated_profit == pytest.approx(15.0)
        assert p.success is True
        assert p.strike == 100

    def test_exit_within_hold_window(self, minute_bars):
        # move arrives 16 minutes after the only candidate entry
        bars = minute_bars([100.0] * 22 + [101.0] * 20)
        params = PatternScanParams(min_stock_move=0.10, max_hold_minutes=15)
        for p in IntradayPatternScanner.scan(bars, params):
            assert 1 <= p.hold_minutes <= 15
            assert p.stock_move >= 0.10 - 1e-9

    def test_too_few_bars(self, minute_bars):
        closes = [100.0, 101.0] * 10
        assert len(closes) == 15 + 5
        assert IntradayPatternScanner.scan(minute_bars(closes)) == []

    def test_one_bar_past_threshold(self, minute_bars):
        closes = [100.0, 101.0] * 10 + [100.0]
        assert len(IntradayPatternScanner.scan(minute_bars(closes))) == 1

    def test_volume_checked_on_entry_only(self, minute_bars):
        closes = [100.0] * 6 + [100.5] * 20
        quiet_entry = [5000.0] * 26
        quiet_entry[5] = 10.0
        quiet_exit = [5000.0] * 26
        quiet_exit[6] = 10.0

        assert IntradayPatternScanner.scan(minute_bars(closes, volume=quiet_entry)) == []
        assert len(IntradayPatternScanner.scan(minute_bars(closes, volume=quiet_exit))) == 1
        no_filter = PatternScanParams(min_volume=None)
        assert len(IntradayPatternScanner.scan(minute_bars(closes, volume=quiet_entry), no_filter)) == 1

    def test_sorted_by_estimated_profit(self, minute_bars):
        closes = [100.0] * 6 + [100.2, 100.1, 100.8, 100.3, 101.5] + [101.5] * 20
        patterns = IntradayPatternScanner.scan(minute_bars(closes), PatternScanParams(min_stock_move=0.10))
        profits = [p.estimated_profit for p in patterns]
        assert len(profits) > 1
        assert profits == sorted(profits, reverse=True)

    def test_flat_series(self, minute_bars):
        assert IntradayPatternScanner.scan(minute_bars([100.0] * 60)) == []

    def test_scan_sessions_does_not_cross_overnight(self, minute_bars):
        day1 = minute_bars([100.0] * 30)
        day2 = minute_bars([101.0] * 30, start=datetime(2024, 3, 6, 14, 30, tzinfo=timezone.utc))

        assert IntradayPatternScanner.scan(day1 + day2) != []
        assert IntradayPatternScanner.scan_sessions(day1 + day2) == []

    def test_scan_sessions_merges_days(self, minute_bars):
        day1 = minute_bars([100.0] * 6 + [99.4] * 20)
        day2 = minute_bars(
            [100.0] * 6 + [100.3] * 20,
            start=datetime(2024, 3, 6, 14, 30, tzinfo=timezone.utc),
        )
        patterns = IntradayPatternScanner.scan_sessions(day1 + day2)

        assert [p.direction for p in patterns] == ["PUT", "CALL"]
        assert patterns[0].estimated_profit > patterns[1].estimated_profit

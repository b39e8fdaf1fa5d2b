"""
Unit Tests for the hours allocator
==================================
"""
import datetime
from decimal import Decimal

import pytest

from teamwork_hours.allocator import (
    allocate,
    is_working_day,
    parse_duration,
    remaining_workload,
    split_days,
    working_days,
)
from teamwork_hours.errors import InvalidInput
from teamwork_hours.models import TimeOff


D = datetime.date


class TestAllocate:
    """Tests for allocate()."""

    def test_thirteen_full_days(self, monday):
        """104 hours at 8 per day fill the 13 working days from the start."""
        plan = allocate(monday, 104, 8)

        assert len(plan) == 13
        assert all(e.hours == 8 for e in plan)
        assert plan.first_date == monday
        assert plan.last_date == D(2019, 7, 10)
        assert plan.allocated_hours == Decimal("104")

    def test_remainder_on_last_day(self, monday):
        plan = allocate(monday, 20, 8)

        assert [(e.date, e.hours) for e in plan] == [
            (D(2019, 6, 24), 8),
            (D(2019, 6, 25), 8),
            (D(2019, 6, 26), 4),
        ]

    def test_start_on_weekend_moves_to_monday(self):
        plan = allocate(D(2019, 6, 29), 8, 8)

        assert [e.date for e in plan] == [D(2019, 7, 1)]

    def test_skips_weekends(self, monday):
        plan = allocate(monday, 80, 8)

        assert all(e.date.weekday() < 5 for e in plan)
        assert D(2019, 6, 29) not in [e.date for e in plan]

    def test_excluded_dates_are_skipped(self, monday):
        vacation = {D(2019, 6, 25), D(2019, 6, 26)}
        plan = allocate(monday, 24, 8, excluded_dates=vacation)

        dates = [e.date for e in plan]
        assert dates == [D(2019, 6, 24), D(2019, 6, 27), D(2019, 6, 28)]
        assert not vacation & set(dates)

    def test_fractional_hours_sum_exactly(self, monday):
        plan = allocate(monday, "37.5", "7.5")

        assert len(plan) == 5
        assert plan.allocated_hours == Decimal("37.5")

    def test_float_input_keeps_decimal_value(self, monday):
        plan = allocate(monday, 10.1, 8)

        assert plan.entries[-1].hours == Decimal("2.1")
        assert plan.allocated_hours == Decimal("10.1")

    def test_total_below_one_day(self, monday):
        plan = allocate(monday, 3, 8)

        assert [(e.date, e.hours) for e in plan] == [(monday, 3)]

    def test_accepts_datetime_start(self):
        plan = allocate(datetime.datetime(2019, 6, 24, 9, 30), 8)

        assert plan.first_date == D(2019, 6, 24)

    def test_default_eight_hours_per_day(self, monday):
        assert len(allocate(monday, 16)) == 2

    @pytest.mark.parametrize("start", [D(2019, 6, 24), D(2019, 6, 27), D(2019, 6, 30), D(2020, 2, 28)])
    @pytest.mark.parametrize("total,per_day", [(1, 8), (41, 8), ("12.25", 6), (100, "7.5")])
    def test_plan_invariants(self, start, total, per_day):
        """Sum is exact, dates strictly increase, no weekend."""
        excluded = {start + datetime.timedelta(days=3)}
        plan = allocate(start, total, per_day, excluded_dates=excluded)

        dates = [e.date for e in plan]
        assert plan.allocated_hours == Decimal(str(total))
        assert dates == sorted(set(dates))
        assert all(is_working_day(d) for d in dates)
        assert not excluded & set(dates)
        assert all(0 < e.hours <= Decimal(str(per_day)) for e in plan)

    def test_booked_hours_reduce_capacity(self, monday):
        booked = {monday: Decimal("3"), D(2019, 6, 25): 8}
        plan = allocate(monday, 13, 8, booked_hours=booked)

        assert [(e.date, e.hours) for e in plan] == [
            (D(2019, 6, 24), 5),
            (D(2019, 6, 26), 8),
        ]

    def test_overbooked_day_is_skipped(self, monday):
        plan = allocate(monday, 8, 8, booked_hours={monday: 10})

        assert plan.first_date == D(2019, 6, 25)

    def test_zero_total_rejected(self, monday):
        with pytest.raises(InvalidInput, match="total_hours"):
            allocate(monday, 0, 8)

    def test_negative_total_rejected(self, monday):
        with pytest.raises(InvalidInput):
            allocate(monday, -4, 8)

    @pytest.mark.parametrize("per_day", [0, -1, "-0.5"])
    def test_non_positive_hours_per_day_rejected(self, monday, per_day):
        with pytest.raises(InvalidInput, match="hours_per_day"):
            allocate(monday, 8, per_day)

    @pytest.mark.parametrize("value", ["abc", "", None, True, float("nan")])
    def test_non_numeric_total_rejected(self, monday, value):
        with pytest.raises(InvalidInput):
            allocate(monday, value, 8)

    @pytest.mark.parametrize("total, per_day", [("8.001", 8), (8, "7.001"), ("0.3333", 8)])
    def test_sub_minute_hours_rejected(self, monday, total, per_day):
        with pytest.raises(InvalidInput, match="whole number of minutes"):
            allocate(monday, total, per_day)

    def test_whole_minutes_accepted(self, monday):
        plan = allocate(monday, "8.25", "7.75")

        assert [e.total_minutes for e in plan] == [465, 30]

    def test_invalid_input_is_value_error(self, monday):
        with pytest.raises(ValueError):
            allocate(monday, 0)

    def test_start_must_be_a_date(self):
        with pytest.raises(InvalidInput):
            allocate("2019-06-24", 8)


class TestParseDuration:

    @pytest.mark.parametrize("text,expected", [
        ("8d4h", Decimal("68")),
        ("3d", Decimal("24")),
        ("6h", Decimal("6")),
        ("1d 2h", Decimal("10")),
        ("12", Decimal("12")),
        ("7.5", Decimal("7.5")),
        ("2h30", None),
    ])
    def test_formats(self, text, expected):
        if expected is None:
            with pytest.raises(InvalidInput):
                parse_duration(text)
        else:
            assert parse_duration(text) == expected

    def test_custom_day_length(self):
        assert parse_duration("2d1h", hours_per_day=6) == Decimal("13")

    @pytest.mark.parametrize("text", ["", "   ", "d", "xh", "tomorrow"])
    def test_garbage_rejected(self, text):
        with pytest.raises(InvalidInput):
            parse_duration(text)


class TestHelpers:

    def test_working_days_half_open(self, monday):
        days = list(working_days(monday, D(2019, 7, 1)))

        assert days == [monday + datetime.timedelta(days=i) for i in range(5)]

    def test_split_days(self):
        assert split_days(Decimal("20"), 8) == (2, Decimal("4"))
        assert split_days(0) == (0, Decimal("0"))

    def test_remaining_workload(self, monday, remote_entries):
        time_off = [TimeOff(date=D(2019, 6, 25), hours=Decimal("2"))]

        assert remaining_workload(monday, remote_entries, time_off) == 0
        assert remaining_workload(D(2019, 6, 25), remote_entries, time_off) == 2
        assert remaining_workload(D(2019, 6, 26), remote_entries, time_off) == 8

    def test_remaining_workload_never_negative(self, monday, remote_entries):
        time_off = [TimeOff(date=monday, hours=Decimal("8"))]

        assert remaining_workload(monday, remote_entries, time_off) == 0

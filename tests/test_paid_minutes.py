"""Tests for paid-minutes calculation and work-hours aggregation."""

from datetime import date

import pytest

from storeshift.domain.models import Assignment, AssignmentStatus, Member, WorkItem
from storeshift.hours.paid_minutes import (
    assignment_paid_minutes,
    minutes_to_hours,
    paid_minutes,
    summarize_work_hours,
)


class TestPaidMinutes:
    """Tests for paid_minutes."""

    def test_overnight_wraparound(self):
        assert paid_minutes("22:00", "02:00") == 240

    def test_day_shift_with_break(self):
        assert paid_minutes("09:00", "18:00", 60) == 480

    def test_end_at_midnight(self):
        assert paid_minutes("16:00", "24:00") == 480

    def test_equal_times_are_a_full_day(self):
        assert paid_minutes("09:00", "09:00") == 1440

    def test_break_longer_than_shift_clamps_to_zero(self):
        assert paid_minutes("09:00", "10:00", 90) == 0

    def test_assignment_uses_work_item_break(self):
        item = WorkItem(id="w1", store_id="s1", name="Day", start_min=540, end_min=1080, unpaid_break_min=30)
        assignment = Assignment("s1", "m1", "w1", date(2024, 6, 3), "09:00", "18:00")
        assert assignment_paid_minutes(assignment, item) == 510
        assert assignment_paid_minutes(assignment) == 540

    @pytest.mark.parametrize(
        "minutes,hours",
        [(240, 4.0), (480, 8.0), (510, 8.5), (45, 0.8), (3, 0.1), (2, 0.0), (0, 0.0)],
    )
    def test_minutes_to_hours_rounds_half_up(self, minutes, hours):
        assert minutes_to_hours(minutes) == hours


class TestSummarizeWorkHours:
    """Tests for summarize_work_hours."""

    @pytest.fixture
    def work_items(self):
        return {
            "w-day": WorkItem(id="w-day", store_id="s1", name="Day", start_min=540, end_min=1080, unpaid_break_min=60),
            "w-night": WorkItem(id="w-night", store_id="s1", name="Night", start_min=0, end_min=240),
        }

    @pytest.fixture
    def members(self):
        return {
            "m1": Member("m1", "s1", "Bob"),
            "m2": Member("m2", "s1", "Alice"),
            "m3": Member("m3", "s1", " Carol "),
        }

    def test_weekly_and_monthly_totals(self, work_items, members):
        rows = [
            Assignment("s1", "m1", "w-day", date(2024, 6, 3), "09:00", "18:00"),
            Assignment("s1", "m1", "w-day", date(2024, 6, 4), "09:00", "18:00", status=AssignmentStatus.CONFIRMED),
            Assignment("s1", "m2", "w-night", date(2024, 6, 4), "22:00", "02:00"),
            Assignment("s1", "m2", "w-day", date(2024, 6, 20), "09:00", "18:00"),
            Assignment("s1", "m3", "w-day", date(2024, 6, 5), "09:00", "18:00", status=AssignmentStatus.CANCELLED),
        ]
        summary = summarize_work_hours(
            rows,
            work_items,
            members,
            week=(date(2024, 6, 3), date(2024, 6, 9)),
            month=(date(2024, 6, 1), date(2024, 6, 30)),
        )

        assert [(m.member_name, m.hours) for m in summary.week.by_member] == [
            ("Bob", 16.0),
            ("Alice", 4.0),
        ]
        assert summary.week.total_hours == 20.0
        assert [(m.member_name, m.hours) for m in summary.month.by_member] == [
            ("Bob", 16.0),
            ("Alice", 12.0),
        ]
        assert summary.month.total_hours == 28.0

    def test_ties_sorted_by_name(self, work_items, members):
        rows = [
            Assignment("s1", "m1", "w-day", date(2024, 6, 3), "09:00", "18:00"),
            Assignment("s1", "m3", "w-day", date(2024, 6, 3), "09:00", "18:00"),
            Assignment("s1", "m2", "w-day", date(2024, 6, 3), "09:00", "18:00"),
        ]
        summary = summarize_work_hours(
            rows, work_items, members,
            week=(date(2024, 6, 3), date(2024, 6, 9)),
            month=(date(2024, 6, 1), date(2024, 6, 30)),
        )
        assert [m.member_name for m in summary.week.by_member] == ["Alice", "Bob", "Carol"]

    def test_to_dict_shape(self, work_items, members):
        summary = summarize_work_hours(
            [], work_items, members,
            week=(date(2024, 6, 3), date(2024, 6, 9)),
            month=(date(2024, 6, 1), date(2024, 6, 30)),
        )
        data = summary.to_dict()
        assert data["summary"] == {"weekly_total_hours": 0.0, "monthly_total_hours": 0.0}
        assert data["period"]["week_from"] == "2024-06-03"
        assert data["weekly_by_member"] == []

"""Paid-hours calculation for assignments."""

from storeshift.hours.paid_minutes import (
    MemberHours,
    PeriodHours,
    WorkHoursSummary,
    assignment_paid_minutes,
    minutes_to_hours,
    paid_minutes,
    summarize_work_hours,
)

__all__ = [
    "MemberHours",
    "PeriodHours",
    "WorkHoursSummary",
    "assignment_paid_minutes",
    "minutes_to_hours",
    "paid_minutes",
    "summarize_work_hours",
]

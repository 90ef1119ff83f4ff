"""Paid-minutes calculation and work-hours aggregation.

A shift whose end is not after its start crosses midnight, so 22:00-02:00
is four hours. Unpaid break minutes are subtracted and the result never goes
below zero. Aggregated minutes are reported as hours rounded half up to one
decimal place.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional

from storeshift.domain.models import Assignment, AssignmentStatus, Member, WorkItem
from storeshift.domain.timeutils import MINUTES_PER_DAY, parse_hhmm

# Cancelled shifts are not paid
PAID_STATUSES = frozenset({AssignmentStatus.ASSIGNED, AssignmentStatus.CONFIRMED})


def paid_minutes(start_time: str, end_time: str, unpaid_break_min: int = 0) -> int:
    """Payable minutes of a shift.

    Args:
        start_time: ``HH:MM`` start.
        end_time: ``HH:MM`` end; not after start means the next day.
        unpaid_break_min: Unpaid break to deduct.

    Returns:
        ``max(0, (end - start) - unpaid_break_min)``.
    """
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return max(0, (end - start) - (unpaid_break_min or 0))


def minutes_to_hours(minutes: int) -> float:
    """Convert minutes to hours, rounded half up to one decimal."""
    return math.floor(minutes / 60 * 10 + 0.5) / 10


def assignment_paid_minutes(
    assignment: Assignment,
    work_item: Optional[WorkItem] = None,
) -> int:
    """Paid minutes of an assignment, taking the break from its work item."""
    unpaid_break = work_item.unpaid_break_min if work_item else 0
    return paid_minutes(assignment.start_time, assignment.end_time, unpaid_break)


@dataclass(frozen=True)
class MemberHours:
    """Paid hours of one member over a period."""

    member_id: str
    member_name: str
    minutes: int

    @property
    def hours(self) -> float:
        return minutes_to_hours(self.minutes)

    def to_dict(self) -> dict:
        return {"member_id": self.member_id, "member_name": self.member_name, "hours": self.hours}


@dataclass
class PeriodHours:
    """Per-member and total paid hours for one date window."""

    date_from: date
    date_to: date
    by_member: list[MemberHours] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(m.minutes for m in self.by_member)

    @property
    def total_hours(self) -> float:
        return minutes_to_hours(self.total_minutes)


@dataclass
class WorkHoursSummary:
    """Weekly and monthly paid-hours breakdown for a store."""

    week: PeriodHours
    month: PeriodHours

    def to_dict(self) -> dict:
        return {
            "summary": {
                "weekly_total_hours": self.week.total_hours,
                "monthly_total_hours": self.month.total_hours,
            },
            "weekly_by_member": [m.to_dict() for m in self.week.by_member],
            "monthly_by_member": [m.to_dict() for m in self.month.by_member],
            "period": {
                "week_from": self.week.date_from.isoformat(),
                "week_to": self.week.date_to.isoformat(),
                "month_from": self.month.date_from.isoformat(),
                "month_to": self.month.date_to.isoformat(),
            },
        }


def _period_hours(
    date_from: date,
    date_to: date,
    minutes_by_member: Mapping[str, int],
    names: Mapping[str, str],
) -> PeriodHours:
    rows = [
        MemberHours(member_id=member_id, member_name=names.get(member_id) or member_id, minutes=minutes)
        for member_id, minutes in minutes_by_member.items()
    ]
    rows.sort(key=lambda m: (-m.hours, m.member_name))
    return PeriodHours(date_from=date_from, date_to=date_to, by_member=rows)


def summarize_work_hours(
    assignments: Iterable[Assignment],
    work_items_by_id: Mapping[str, WorkItem],
    members_by_id: Mapping[str, Member],
    week: tuple[date, date],
    month: tuple[date, date],
) -> WorkHoursSummary:
    """Sum paid minutes per member for a week window and a month window.

    Only ASSIGNED and CONFIRMED assignments count. Members are ordered by
    hours descending, then by name.
    """
    weekly: dict[str, int] = defaultdict(int)
    monthly: dict[str, int] = defaultdict(int)

    for assignment in assignments:
        if assignment.status not in PAID_STATUSES:
            continue
        minutes = assignment_paid_minutes(
            assignment, work_items_by_id.get(assignment.work_item_id)
        )
        if week[0] <= assignment.date <= week[1]:
            weekly[assignment.member_id] += minutes
        if month[0] <= assignment.date <= month[1]:
            monthly[assignment.member_id] += minutes

    names = {member_id: m.name.strip() for member_id, m in members_by_id.items()}
    return WorkHoursSummary(
        week=_period_hours(week[0], week[1], weekly, names),
        month=_period_hours(month[0], month[1], monthly, names),
    )

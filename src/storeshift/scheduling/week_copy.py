"""Week-to-week duplication of a published schedule.

Copying is split in two steps. ``WeekCopyPlanner`` is pure: given the
source week's assignments it computes the rows to insert into the target
week. Applying the plan (delete the target week's ASSIGNED rows, insert the
new ones) is the persistence layer's job and happens in one transaction.

Rows are mapped by weekday, not by adding the raw day offset: the Monday of
the source week lands on the Monday of the target week, and so on, whatever
month or year boundary lies between them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from storeshift.domain.models import Assignment, AssignmentStatus
from storeshift.domain.timeutils import day_offset, week_bounds, weekday_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekRange:
    """A seven-day week."""

    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    @classmethod
    def containing(cls, d: date, week_starts_on: int = 0) -> "WeekRange":
        start, end = week_bounds(d, week_starts_on)
        return cls(start=start, end=end)


@dataclass
class WeekCopyPlan:
    """Rows to write for a week copy.

    Attributes:
        source: Source week.
        target: Target week.
        day_offset: Days between the two week starts (informational only).
        new_assignments: Rows to insert into the target week.
        orphaned_count: Source rows dropped because their work item or member is gone.
    """

    source: WeekRange
    target: WeekRange
    day_offset: int
    new_assignments: list[Assignment] = field(default_factory=list)
    orphaned_count: int = 0

    @property
    def same_week(self) -> bool:
        """Copying a week onto itself deletes and inserts nothing."""
        return self.source.start == self.target.start


@dataclass
class WeekCopyResult:
    """What a week copy actually did.

    Deletion and insertion are reported separately so callers can tell
    "target week replaced with nothing" from "nothing to do".
    """

    copied_count: int = 0
    deleted_count: int = 0
    orphaned_count: int = 0
    same_week: bool = False

    @property
    def nothing_copied(self) -> bool:
        return self.copied_count == 0

    @property
    def message(self) -> str:
        if self.same_week:
            return "Source and target week are the same; nothing copied"
        if self.nothing_copied:
            return "No schedules to copy"
        return "Schedule copied successfully"

    def to_dict(self) -> dict:
        return {
            "copied_count": self.copied_count,
            "deleted_count": self.deleted_count,
            "orphaned_count": self.orphaned_count,
            "same_week": self.same_week,
            "message": self.message,
        }


class WeekCopyPlanner:
    """Plans the duplication of one week's ASSIGNED rows onto another week.

    Example:
        >>> planner = WeekCopyPlanner()
        >>> plan = planner.plan(rows, date(2024, 6, 3), date(2024, 6, 10),
        ...                     work_item_ids={"w1"}, member_ids={"m1"})
        >>> [a.date for a in plan.new_assignments]
        [datetime.date(2024, 6, 10)]
    """

    def __init__(self, week_starts_on: int = 0):
        self.week_starts_on = week_starts_on

    def weeks(self, source_week_start: date, target_week_start: date) -> tuple[WeekRange, WeekRange]:
        """Normalize both dates to the weeks that contain them."""
        return (
            WeekRange.containing(source_week_start, self.week_starts_on),
            WeekRange.containing(target_week_start, self.week_starts_on),
        )

    def map_date(self, source_date: date, target: WeekRange) -> date:
        """Same weekday as ``source_date`` inside the target week."""
        return target.start + timedelta(days=weekday_index(source_date, self.week_starts_on))

    def plan(
        self,
        source_assignments: Iterable[Assignment],
        source_week_start: date,
        target_week_start: date,
        work_item_ids: Iterable[str],
        member_ids: Iterable[str],
        actor: Optional[str] = None,
    ) -> WeekCopyPlan:
        """Build the copy plan.

        Args:
            source_assignments: Assignments read from the source week.
            source_week_start: Any date in the source week.
            target_week_start: Any date in the target week.
            work_item_ids: Work items that still exist in the store.
            member_ids: Members that still exist in the store.
            actor: Stamp recorded as ``created_by`` on the copies.

        Returns:
            WeekCopyPlan; empty when copying a week onto itself.
        """
        source, target = self.weeks(source_week_start, target_week_start)
        plan = WeekCopyPlan(
            source=source,
            target=target,
            day_offset=day_offset(source.start, target.start),
        )
        if plan.same_week:
            return plan

        known_items = set(work_item_ids)
        known_members = set(member_ids)

        for row in source_assignments:
            if row.status is not AssignmentStatus.ASSIGNED or not source.contains(row.date):
                continue
            if row.work_item_id not in known_items or row.member_id not in known_members:
                plan.orphaned_count += 1
                continue
            plan.new_assignments.append(
                Assignment(
                    store_id=row.store_id,
                    member_id=row.member_id,
                    work_item_id=row.work_item_id,
                    date=self.map_date(row.date, target),
                    start_time=row.start_time,
                    end_time=row.end_time,
                    status=AssignmentStatus.ASSIGNED,
                    notes=row.notes,
                    created_by=actor,
                )
            )

        if plan.orphaned_count:
            logger.warning(
                "Skipped %d orphaned assignments while copying week %s",
                plan.orphaned_count,
                source.start.isoformat(),
            )
        logger.debug(
            "Week copy plan %s -> %s (offset %d days): %d rows",
            source.start.isoformat(),
            target.start.isoformat(),
            plan.day_offset,
            len(plan.new_assignments),
        )
        return plan

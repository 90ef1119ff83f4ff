"""Greedy auto-assignment of members to open work item slots.

The assigner makes a single deterministic pass:
1. Walk the target dates in ascending order
2. Walk the store's work items in stable order for each date
3. Skip slots that already hold an active assignment
4. Pick the first eligible candidate that is not yet used that day
5. Stamp the shift times from the store's business hours

There is no backtracking and no optimisation. Slots without a candidate are
left open; partial fills are normal. ``WorkItem.max_headcount`` is not
consulted, each slot receives at most one member per run.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from storeshift.domain.models import (
    Assignment,
    AssignmentStatus,
    StoreSnapshot,
)
from storeshift.domain.policies import BusinessHoursTimePolicy, ShiftTimePolicy
from storeshift.domain.timeutils import date_range, slot_key
from storeshift.scheduling.candidate_pool import CandidatePoolBuilder

logger = logging.getLogger(__name__)


@dataclass
class AutoAssignResult:
    """Outcome of one auto-assignment run.

    Attributes:
        assignments: Newly created (not yet persisted) assignments.
        unfilled_slots: (work_item_id, date) pairs no candidate could fill.
        skipped_slots: (work_item_id, date) pairs that were already filled.
    """

    assignments: list[Assignment] = field(default_factory=list)
    unfilled_slots: list[tuple[str, date]] = field(default_factory=list)
    skipped_slots: list[tuple[str, date]] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.assignments)

    def get_summary(self) -> dict:
        return {
            "created_count": self.created_count,
            "unfilled_count": len(self.unfilled_slots),
            "skipped_count": len(self.skipped_slots),
        }


class AutoAssigner:
    """First-fit scheduler that fills open (work item, date) slots.

    Example:
        >>> assigner = AutoAssigner()
        >>> result = assigner.assign(snapshot, date(2024, 6, 3), date(2024, 6, 9))
        >>> result.created_count
        7
    """

    def __init__(
        self,
        time_policy: Optional[ShiftTimePolicy] = None,
        default_start: str = "09:00",
        default_end: str = "18:00",
    ):
        """Initialize the assigner.

        Args:
            time_policy: Policy deciding shift times. When omitted, one is
                built per run from the snapshot's business hours.
            default_start: Fallback start time for weekdays without hours.
            default_end: Fallback end time for weekdays without hours.
        """
        self.time_policy = time_policy
        self.default_start = default_start
        self.default_end = default_end

    def _policy_for(self, snapshot: StoreSnapshot) -> ShiftTimePolicy:
        if self.time_policy is not None:
            return self.time_policy
        return BusinessHoursTimePolicy.for_store(
            snapshot.business_hours,
            default_start=self.default_start,
            default_end=self.default_end,
        )

    def target_dates(
        self,
        date_from: date,
        date_to: date,
        target_date: Optional[date] = None,
    ) -> list[date]:
        """Dates to process: the single target date, or the inclusive range."""
        if target_date is not None:
            return [target_date]
        return date_range(date_from, date_to)

    def assign(
        self,
        snapshot: StoreSnapshot,
        date_from: date,
        date_to: date,
        target_date: Optional[date] = None,
        target_member_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> AutoAssignResult:
        """Fill open slots across a date range or a single date.

        Args:
            snapshot: Store data covering the dates being scheduled.
            date_from: First date of the range (inclusive).
            date_to: Last date of the range (inclusive).
            target_date: If given, only this date is scheduled.
            target_member_id: If given, only this member may be picked.
            actor: Stamp recorded as ``created_by`` on new assignments.

        Returns:
            AutoAssignResult with the new assignments in pick order.
        """
        store_id = snapshot.store.id
        policy = self._policy_for(snapshot)
        builder = CandidatePoolBuilder(
            snapshot.members,
            snapshot.required_roles,
            snapshot.unavailability,
            snapshot.assignments,
        )

        filled: set[tuple[str, date]] = {
            (a.work_item_id, a.date) for a in snapshot.assignments if a.is_active
        }
        picked: set[str] = set()
        result = AutoAssignResult()

        for schedule_date in self.target_dates(date_from, date_to, target_date):
            for work_item in snapshot.work_items:
                slot = (work_item.id, schedule_date)
                if slot in filled:
                    result.skipped_slots.append(slot)
                    continue

                pool = builder.pool_for(work_item, schedule_date, target_member_id)
                pick = next(
                    (m for m in pool if slot_key(m, schedule_date) not in picked),
                    None,
                )
                if pick is None:
                    result.unfilled_slots.append(slot)
                    continue

                start_time, end_time = policy.get_shift_times(schedule_date)
                result.assignments.append(
                    Assignment(
                        store_id=store_id,
                        member_id=pick,
                        work_item_id=work_item.id,
                        date=schedule_date,
                        start_time=start_time,
                        end_time=end_time,
                        status=AssignmentStatus.ASSIGNED,
                        created_by=actor,
                    )
                )
                picked.add(slot_key(pick, schedule_date))
                filled.add(slot)

        logger.debug(
            "Auto-assign for store %s: %s", store_id, result.get_summary()
        )
        return result

"""Transactional entry points of the scheduler.

``SchedulingService`` is the seam between callers (the CLI, a web handler)
and the pure scheduling core. Each operation validates its request, loads a
fresh snapshot of the store inside one database transaction, runs the core
algorithm and writes the outcome before the transaction commits.
"""

import calendar
import datetime
import logging
from typing import Optional, Union

from sqlalchemy.orm import sessionmaker

from storeshift.domain.config import SchedulingConfig
from storeshift.domain.models import (
    Assignment,
    AssignmentStatus,
    Member,
    StoreSnapshot,
    Unavailability,
    WorkItem,
)
from storeshift.domain.timeutils import week_bounds
from storeshift.errors import InputValidationError, NotFoundError
from storeshift.hours.paid_minutes import PAID_STATUSES, WorkHoursSummary, summarize_work_hours
from storeshift.persistence.repository import ScheduleRepository
from storeshift.scheduling.auto_assigner import AutoAssigner, AutoAssignResult
from storeshift.scheduling.manual import (
    ensure_available,
    ensure_not_assigned,
    replaced_assignments,
    validate_shift_times,
    validate_time_window,
)
from storeshift.scheduling.week_copy import WeekCopyPlanner, WeekCopyResult
from storeshift.service.requests import (
    AutoAssignRequest,
    CopyWeekRequest,
    CoverageRequest,
    parse_date,
)
from storeshift.validation.role_coverage import CoverageReport, RoleCoverageValidator

logger = logging.getLogger(__name__)


def _parse_status(value: Union[str, AssignmentStatus]) -> AssignmentStatus:
    if isinstance(value, AssignmentStatus):
        return value
    try:
        return AssignmentStatus(str(value).upper())
    except ValueError as exc:
        raise InputValidationError(f"Unknown assignment status {value!r}", field="status") from exc


def _find_member(repo: ScheduleRepository, store_id: str, member_id: str) -> Member:
    for member in repo.list_members(store_id):
        if member.id == member_id:
            return member
    raise NotFoundError(f"Member {member_id} not found in store {store_id}")


def _find_work_item(repo: ScheduleRepository, store_id: str, work_item_id: str) -> WorkItem:
    for item in repo.list_work_items(store_id):
        if item.id == work_item_id:
            return item
    raise NotFoundError(f"Work item {work_item_id} not found in store {store_id}")


class SchedulingService:
    """Scheduling operations for stores kept in a relational database.

    Example:
        >>> engine = create_db_engine("sqlite:///storeshift.db")
        >>> service = SchedulingService(create_session_factory(engine))
        >>> result = service.auto_assign(
        ...     AutoAssignRequest("s1", date(2024, 6, 3), date(2024, 6, 9))
        ... )
        >>> result.created_count
        7
    """

    def __init__(self, session_factory: sessionmaker, config: Optional[SchedulingConfig] = None):
        """Initialize the service.

        Args:
            session_factory: SQLAlchemy sessionmaker bound to the schedule database.
            config: Scheduling configuration. Uses defaults if not provided.
        """
        self.session_factory = session_factory
        self.config = config or SchedulingConfig()
        self.assigner = AutoAssigner(
            default_start=self.config.default_start_time,
            default_end=self.config.default_end_time,
        )
        self.planner = WeekCopyPlanner(week_starts_on=self.config.week_starts_on)
        self.coverage_validator = RoleCoverageValidator()

    # ------------------------------------------------------------------
    # Auto-assignment
    # ------------------------------------------------------------------

    def auto_assign(self, request: AutoAssignRequest) -> AutoAssignResult:
        """Fill open slots and store the new assignments.

        Raises:
            InputValidationError: If the request is malformed.
            StoreNotFoundError: If the store is missing or archived.
            NotFoundError: If the target member is not in the store.
            AssignmentConflictError: If a concurrent write double-booked a member.
        """
        request.validate()
        if request.date is not None:
            window = (request.date, request.date)
        else:
            window = (request.date_from, request.date_to)

        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            snapshot = repo.load_snapshot(request.store_id, *window)
            if request.member_id is not None and request.member_id not in snapshot.members_by_id:
                raise NotFoundError(
                    f"Member {request.member_id} not found in store {request.store_id}"
                )

            result = self.assigner.assign(
                snapshot,
                request.date_from,
                request.date_to,
                target_date=request.date,
                target_member_id=request.member_id,
                actor=request.actor,
            )
            result.assignments = repo.add_assignments(result.assignments)

        logger.info(
            "Auto-assigned %d slots for store %s (%s to %s, %d unfilled)",
            result.created_count,
            request.store_id,
            window[0].isoformat(),
            window[1].isoformat(),
            len(result.unfilled_slots),
        )
        return result

    # ------------------------------------------------------------------
    # Role coverage
    # ------------------------------------------------------------------

    def validate_role_coverage(self, request: CoverageRequest) -> CoverageReport:
        """Report per-role coverage of work items for a set of members."""
        request.validate()
        with self.session_factory() as session:
            repo = ScheduleRepository(session)
            repo.get_store(request.store_id)
            store_items = {w.id for w in repo.list_work_items(request.store_id)}
            unknown = [i for i in request.work_item_ids if i not in store_items]
            if unknown:
                raise NotFoundError(
                    f"Work items not found in store {request.store_id}: {', '.join(unknown)}"
                )

            requirements = repo.list_required_roles(request.work_item_ids)
            roles_by_id = {r.id: r for r in repo.list_roles(request.store_id)}
            member_roles = {m.id: m.role_ids for m in repo.list_members(request.store_id)}

        report = self.coverage_validator.validate(
            requirements,
            roles_by_id,
            member_roles,
            request.assigned_member_ids,
            locale=request.locale,
        )
        logger.info(
            "Role coverage for store %s: valid=%s, %d roles short",
            request.store_id,
            report.is_valid,
            len(report.insufficient_roles),
        )
        return report

    # ------------------------------------------------------------------
    # Week copy
    # ------------------------------------------------------------------

    def copy_week(self, request: CopyWeekRequest) -> WeekCopyResult:
        """Replace the target week's ASSIGNED rows with copies of the source week.

        Runs in one transaction; on failure nothing is deleted or inserted.

        Raises:
            StoreNotFoundError: If the store is missing or archived.
            WeekCopyError: If writing the copies fails. Not retried.
        """
        request.validate()
        source, _ = self.planner.weeks(request.source_week_start, request.target_week_start)

        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            repo.get_store(request.store_id)
            source_rows = repo.list_assignments(
                request.store_id,
                source.start,
                source.end,
                statuses=[AssignmentStatus.ASSIGNED],
            )
            plan = self.planner.plan(
                source_rows,
                request.source_week_start,
                request.target_week_start,
                work_item_ids=[w.id for w in repo.list_work_items(request.store_id)],
                member_ids=[m.id for m in repo.list_members(request.store_id)],
                actor=request.actor,
            )
            result = repo.apply_week_copy(request.store_id, plan)

        logger.info(
            "Copied week %s to %s for store %s: %d copied, %d replaced",
            plan.source.start.isoformat(),
            plan.target.start.isoformat(),
            request.store_id,
            result.copied_count,
            result.deleted_count,
        )
        return result

    # ------------------------------------------------------------------
    # Manual assignment
    # ------------------------------------------------------------------

    def assign_member(
        self,
        store_id: str,
        member_id: str,
        work_item_id: str,
        schedule_date: Union[str, datetime.date],
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        notes: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Assignment:
        """Place a member on a work item for one date.

        Times default to the work item's own times. An existing ASSIGNED row
        for the member on that date is replaced.

        Raises:
            AvailabilityConflictError: If the member declared the date unavailable.
            NotFoundError: If the member or work item is not in the store.
        """
        schedule_date = parse_date(schedule_date, "date")
        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            repo.get_store(store_id)
            member = _find_member(repo, store_id, member_id)
            if not member.active:
                raise InputValidationError(f"Member {member_id} is not active", field="member_id")
            work_item = _find_work_item(repo, store_id, work_item_id)

            start_time, end_time = validate_shift_times(
                start_time or work_item.start_time, end_time or work_item.end_time
            )

            ensure_available(
                member_id,
                schedule_date,
                repo.list_unavailability(store_id, schedule_date, schedule_date, member_id),
            )
            existing = repo.list_assignments(
                store_id, schedule_date, schedule_date, member_id=member_id
            )
            replaced = replaced_assignments(existing, member_id, schedule_date)
            repo.delete_assignments(a.id for a in replaced)

            (created,) = repo.add_assignments(
                [
                    Assignment(
                        store_id=store_id,
                        member_id=member_id,
                        work_item_id=work_item_id,
                        date=schedule_date,
                        start_time=start_time,
                        end_time=end_time,
                        notes=notes,
                        created_by=actor,
                    )
                ]
            )

        logger.info(
            "Assigned member %s to %s on %s%s",
            member_id,
            work_item_id,
            schedule_date.isoformat(),
            " (replaced existing)" if replaced else "",
        )
        return created

    def update_assignment(
        self,
        assignment_id: str,
        status: Union[str, AssignmentStatus, None] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        member_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Assignment:
        """Change the status, times, member or notes of an assignment.

        Moving the assignment to another member, or back to ASSIGNED from
        another status, re-checks the member's availability for the date.

        Raises:
            AvailabilityConflictError: If the member declared the date unavailable.
            AssignmentConflictError: If the change double-books the member.
        """
        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            current = repo.get_assignment(assignment_id)
            changes: dict = {}

            if status is not None:
                changes["status"] = _parse_status(status)
            if start_time is not None or end_time is not None:
                new_start = start_time or current.start_time
                new_end = end_time or current.end_time
                changes["start_time"], changes["end_time"] = validate_shift_times(new_start, new_end)
            if member_id is not None and member_id != current.member_id:
                _find_member(repo, current.store_id, member_id)
                changes["member_id"] = member_id
            if notes is not None:
                changes["notes"] = notes

            reactivated = (
                changes.get("status") is AssignmentStatus.ASSIGNED
                and current.status is not AssignmentStatus.ASSIGNED
            )
            if "member_id" in changes or reactivated:
                target_member = changes.get("member_id", current.member_id)
                ensure_available(
                    target_member,
                    current.date,
                    repo.list_unavailability(
                        current.store_id, current.date, current.date, target_member
                    ),
                )

            if not changes:
                return current
            updated = repo.update_assignment(assignment_id, **changes)

        logger.info("Updated assignment %s: %s", assignment_id, ", ".join(sorted(changes)))
        return updated

    def delete_assignment(self, assignment_id: str) -> None:
        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            repo.get_assignment(assignment_id)
            repo.delete_assignments([assignment_id])
        logger.info("Deleted assignment %s", assignment_id)

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def mark_unavailable(
        self,
        store_id: str,
        member_id: str,
        unavailable_date: Union[str, datetime.date],
        reason: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> Unavailability:
        """Record that a member cannot work on a date.

        Marking the same date again overwrites the earlier record. Passing
        both ``start_time`` and ``end_time`` restricts the record to that
        window; passing neither clears any earlier window. Auto-assignment
        still treats a restricted record as the whole day.

        Raises:
            AvailabilityConflictError: If the member is already assigned that date.
            InputValidationError: If only one bound of the window is given or
                the window is malformed.
        """
        unavailable_date = parse_date(unavailable_date, "date")
        if (start_time is None) != (end_time is None):
            raise InputValidationError(
                "A time restriction needs both start_time and end_time", field="start_time/end_time"
            )
        restricted = start_time is not None
        if restricted:
            start_time, end_time = validate_time_window(start_time, end_time)

        with self.session_factory.begin() as session:
            repo = ScheduleRepository(session)
            repo.get_store(store_id)
            _find_member(repo, store_id, member_id)
            ensure_not_assigned(
                member_id,
                unavailable_date,
                repo.list_assignments(store_id, unavailable_date, unavailable_date, member_id=member_id),
            )
            record = repo.upsert_unavailability(
                Unavailability(
                    store_id=store_id,
                    member_id=member_id,
                    date=unavailable_date,
                    reason=reason,
                    has_time_restriction=restricted,
                    start_time=start_time,
                    end_time=end_time,
                )
            )
        logger.info(
            "Member %s marked unavailable on %s%s",
            member_id,
            unavailable_date.isoformat(),
            f" ({start_time}-{end_time})" if restricted else "",
        )
        return record

    def list_unavailable(
        self,
        store_id: str,
        date_from: Union[str, datetime.date],
        date_to: Union[str, datetime.date],
        member_id: Optional[str] = None,
    ) -> list[Unavailability]:
        """Unavailability records in a date range, ordered by date then member."""
        date_from = parse_date(date_from, "date_from")
        date_to = parse_date(date_to, "date_to")
        if date_to < date_from:
            raise InputValidationError("date_to must not be before date_from", field="date_to")
        with self.session_factory() as session:
            repo = ScheduleRepository(session)
            repo.get_store(store_id)
            return repo.list_unavailability(store_id, date_from, date_to, member_id)

    def clear_unavailable(
        self,
        store_id: str,
        member_id: str,
        unavailable_date: Union[str, datetime.date],
    ) -> bool:
        """Remove an unavailability record; returns whether one existed."""
        unavailable_date = parse_date(unavailable_date, "date")
        with self.session_factory.begin() as session:
            removed = ScheduleRepository(session).delete_unavailability(
                store_id, member_id, unavailable_date
            )
        return removed > 0

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def work_hours(
        self,
        store_id: str,
        week_from: Optional[datetime.date] = None,
        week_to: Optional[datetime.date] = None,
        month_from: Optional[datetime.date] = None,
        month_to: Optional[datetime.date] = None,
        today: Optional[datetime.date] = None,
    ) -> WorkHoursSummary:
        """Paid hours per member for a week window and a month window.

        Missing bounds default to the week and calendar month containing
        ``today``.
        """
        today = today or datetime.date.today()
        default_week = week_bounds(today, self.config.week_starts_on)
        week_from = week_from or default_week[0]
        week_to = week_to or default_week[1]
        month_from = month_from or today.replace(day=1)
        month_to = month_to or today.replace(day=calendar.monthrange(today.year, today.month)[1])
        if week_to < week_from or month_to < month_from:
            raise InputValidationError("Period end must not be before its start")

        with self.session_factory() as session:
            repo = ScheduleRepository(session)
            repo.get_store(store_id)
            rows = repo.list_assignments(
                store_id,
                min(week_from, month_from),
                max(week_to, month_to),
                statuses=sorted(PAID_STATUSES, key=lambda s: s.value),
            )
            work_items = {w.id: w for w in repo.list_work_items(store_id)}
            members = {m.id: m for m in repo.list_members(store_id)}

        return summarize_work_hours(
            rows,
            work_items,
            members,
            week=(week_from, week_to),
            month=(month_from, month_to),
        )

    def week_snapshot(self, store_id: str, any_day: Union[str, datetime.date]) -> StoreSnapshot:
        """Store data for the week containing ``any_day``, for rosters."""
        start, end = week_bounds(parse_date(any_day, "week"), self.config.week_starts_on)
        with self.session_factory() as session:
            return ScheduleRepository(session).load_snapshot(store_id, start, end)

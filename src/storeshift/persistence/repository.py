"""Row access for the scheduling service.

``ScheduleRepository`` wraps one SQLAlchemy session and converts between
table rows and domain models. It never commits: callers own the
transaction (``with session_factory.begin() as session:``), so a
read-check-write sequence either lands completely or not at all.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storeshift.domain.models import (
    Assignment,
    AssignmentStatus,
    BusinessHour,
    JobRole,
    Member,
    RequiredRole,
    Store,
    StoreSnapshot,
    Unavailability,
    WorkItem,
)
from storeshift.errors import (
    AssignmentConflictError,
    AvailabilityConflictError,
    NotFoundError,
    StoreNotFoundError,
    WeekCopyError,
)
from storeshift.persistence.tables import (
    AssignmentRow,
    BusinessHourRow,
    JobRoleRow,
    MemberRow,
    StoreRow,
    UnavailabilityRow,
    WorkItemRequiredRoleRow,
    WorkItemRow,
    member_job_roles,
)
from storeshift.scheduling.week_copy import WeekCopyPlan, WeekCopyResult, WeekRange

logger = logging.getLogger(__name__)


def _to_assignment(row: AssignmentRow) -> Assignment:
    return Assignment(
        id=row.id,
        store_id=row.store_id,
        member_id=row.member_id,
        work_item_id=row.work_item_id,
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        status=AssignmentStatus(row.status),
        notes=row.notes,
        created_by=row.created_by,
    )


def _to_unavailability(row: UnavailabilityRow) -> Unavailability:
    return Unavailability(
        store_id=row.store_id,
        member_id=row.member_id,
        date=row.date,
        reason=row.reason,
        has_time_restriction=bool(row.has_time_restriction),
        start_time=row.start_time,
        end_time=row.end_time,
    )


def _to_work_item(row: WorkItemRow) -> WorkItem:
    return WorkItem(
        id=row.id,
        store_id=row.store_id,
        name=row.name,
        start_min=row.start_min,
        end_min=row.end_min,
        unpaid_break_min=row.unpaid_break_min,
        max_headcount=row.max_headcount,
        role_hint=row.role_hint,
    )


class ScheduleRepository:
    """Reads and writes schedule data for one session."""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_store(self, store_id: str) -> Store:
        """Load a store; archived stores count as missing."""
        row = self.session.get(StoreRow, store_id)
        if row is None or row.archived:
            raise StoreNotFoundError(store_id)
        return Store(id=row.id, name=row.name, archived=row.archived)

    def list_roles(self, store_id: str) -> list[JobRole]:
        stmt = (
            select(JobRoleRow)
            .where(JobRoleRow.store_id == store_id)
            .order_by(JobRoleRow.created_at, JobRoleRow.id)
        )
        return [
            JobRole(id=r.id, store_id=r.store_id, code=r.code, name=r.name, active=r.active)
            for r in self.session.scalars(stmt)
        ]

    def list_members(self, store_id: str) -> list[Member]:
        """All members of the store in creation order, with their role IDs."""
        stmt = (
            select(MemberRow)
            .where(MemberRow.store_id == store_id)
            .order_by(MemberRow.created_at, MemberRow.id)
        )
        members = [
            Member(
                id=r.id,
                store_id=r.store_id,
                name=r.name,
                user_id=r.user_id,
                active=r.active,
                is_guest=r.is_guest,
            )
            for r in self.session.scalars(stmt)
        ]
        if not members:
            return members

        by_id = {m.id: m for m in members}
        links = self.session.execute(
            select(member_job_roles.c.member_id, member_job_roles.c.job_role_id).where(
                member_job_roles.c.member_id.in_(list(by_id))
            )
        )
        for member_id, role_id in links:
            by_id[member_id].role_ids.add(role_id)
        return members

    def list_work_items(self, store_id: str) -> list[WorkItem]:
        stmt = (
            select(WorkItemRow)
            .where(WorkItemRow.store_id == store_id)
            .order_by(WorkItemRow.created_at, WorkItemRow.id)
        )
        return [_to_work_item(r) for r in self.session.scalars(stmt)]

    def list_required_roles(self, work_item_ids: Iterable[str]) -> list[RequiredRole]:
        ids = list(work_item_ids)
        if not ids:
            return []
        stmt = (
            select(WorkItemRequiredRoleRow)
            .where(WorkItemRequiredRoleRow.work_item_id.in_(ids))
            .order_by(WorkItemRequiredRoleRow.work_item_id, WorkItemRequiredRoleRow.job_role_id)
        )
        return [
            RequiredRole(work_item_id=r.work_item_id, job_role_id=r.job_role_id, min_count=r.min_count)
            for r in self.session.scalars(stmt)
        ]

    def list_business_hours(self, store_id: str) -> list[BusinessHour]:
        stmt = (
            select(BusinessHourRow)
            .where(BusinessHourRow.store_id == store_id)
            .order_by(BusinessHourRow.weekday)
        )
        return [
            BusinessHour(store_id=r.store_id, weekday=r.weekday, open_min=r.open_min, close_min=r.close_min)
            for r in self.session.scalars(stmt)
        ]

    def list_unavailability(
        self,
        store_id: str,
        date_from: datetime.date,
        date_to: datetime.date,
        member_id: Optional[str] = None,
    ) -> list[Unavailability]:
        stmt = select(UnavailabilityRow).where(
            UnavailabilityRow.store_id == store_id,
            UnavailabilityRow.date >= date_from,
            UnavailabilityRow.date <= date_to,
        )
        if member_id is not None:
            stmt = stmt.where(UnavailabilityRow.member_id == member_id)
        stmt = stmt.order_by(UnavailabilityRow.date, UnavailabilityRow.member_id)
        return [_to_unavailability(r) for r in self.session.scalars(stmt)]

    def list_assignments(
        self,
        store_id: str,
        date_from: datetime.date,
        date_to: datetime.date,
        statuses: Optional[Sequence[AssignmentStatus]] = None,
        member_id: Optional[str] = None,
    ) -> list[Assignment]:
        """Assignments in a date range, ordered by date then creation."""
        stmt = select(AssignmentRow).where(
            AssignmentRow.store_id == store_id,
            AssignmentRow.date >= date_from,
            AssignmentRow.date <= date_to,
        )
        if statuses:
            stmt = stmt.where(AssignmentRow.status.in_([s.value for s in statuses]))
        if member_id is not None:
            stmt = stmt.where(AssignmentRow.member_id == member_id)
        stmt = stmt.order_by(AssignmentRow.date, AssignmentRow.created_at, AssignmentRow.id)
        return [_to_assignment(r) for r in self.session.scalars(stmt)]

    def get_assignment(self, assignment_id: str) -> Assignment:
        row = self.session.get(AssignmentRow, assignment_id)
        if row is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return _to_assignment(row)

    def load_snapshot(
        self,
        store_id: str,
        date_from: datetime.date,
        date_to: datetime.date,
    ) -> StoreSnapshot:
        """Everything the scheduling core needs for one store and date range.

        Raises:
            StoreNotFoundError: If the store is missing or archived.
        """
        store = self.get_store(store_id)
        work_items = self.list_work_items(store_id)
        return StoreSnapshot(
            store=store,
            roles=self.list_roles(store_id),
            members=self.list_members(store_id),
            work_items=work_items,
            required_roles=self.list_required_roles(w.id for w in work_items),
            business_hours=self.list_business_hours(store_id),
            unavailability=self.list_unavailability(store_id, date_from, date_to),
            assignments=self.list_assignments(store_id, date_from, date_to),
        )

    # ------------------------------------------------------------------
    # Assignment writes
    # ------------------------------------------------------------------

    def _write_assignments(self, assignments: Sequence[Assignment]) -> list[AssignmentRow]:
        rows = [
            AssignmentRow(
                store_id=a.store_id,
                member_id=a.member_id,
                work_item_id=a.work_item_id,
                date=a.date,
                start_time=a.start_time,
                end_time=a.end_time,
                status=a.status.value,
                notes=a.notes,
                created_by=a.created_by,
            )
            for a in assignments
        ]
        self.session.add_all(rows)
        self.session.flush()
        return rows

    def add_assignments(self, assignments: Sequence[Assignment]) -> list[Assignment]:
        """Insert assignments and return them with their new IDs.

        Raises:
            AssignmentConflictError: If a member would hold two ASSIGNED rows
                on the same date.
        """
        if not assignments:
            return []
        try:
            rows = self._write_assignments(assignments)
        except IntegrityError as exc:
            raise AssignmentConflictError(
                "Member is already assigned on one of the requested dates"
            ) from exc
        return [dataclasses.replace(a, id=row.id) for a, row in zip(assignments, rows)]

    def delete_assignments(self, assignment_ids: Iterable[str]) -> int:
        ids = list(assignment_ids)
        if not ids:
            return 0
        result = self.session.execute(delete(AssignmentRow).where(AssignmentRow.id.in_(ids)))
        return result.rowcount or 0

    def delete_week_assignments(self, store_id: str, week: WeekRange) -> int:
        """Delete the ASSIGNED rows of a week; other statuses are kept."""
        result = self.session.execute(
            delete(AssignmentRow).where(
                AssignmentRow.store_id == store_id,
                AssignmentRow.date >= week.start,
                AssignmentRow.date <= week.end,
                AssignmentRow.status == AssignmentStatus.ASSIGNED.value,
            )
        )
        return result.rowcount or 0

    def update_assignment(self, assignment_id: str, **changes) -> Assignment:
        """Apply field changes to an assignment.

        Raises:
            NotFoundError: If the assignment does not exist.
            AssignmentConflictError: If the change double-books the member.
        """
        row = self.session.get(AssignmentRow, assignment_id)
        if row is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        for name, value in changes.items():
            if isinstance(value, AssignmentStatus):
                value = value.value
            setattr(row, name, value)
        # A failed flush expires the row, so the message cannot read from it
        member_id, day = row.member_id, row.date
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise AssignmentConflictError(
                f"Member {member_id} is already assigned on {day.isoformat()}"
            ) from exc
        return _to_assignment(row)

    def apply_week_copy(self, store_id: str, plan: WeekCopyPlan) -> WeekCopyResult:
        """Replace the target week's ASSIGNED rows with the planned copies.

        Must run inside the caller's transaction; a failure leaves the
        deletion to be rolled back with it.

        Raises:
            WeekCopyError: If inserting the copies fails.
        """
        result = WeekCopyResult(orphaned_count=plan.orphaned_count, same_week=plan.same_week)
        if plan.same_week:
            return result

        result.deleted_count = self.delete_week_assignments(store_id, plan.target)
        if not plan.new_assignments:
            return result
        try:
            self._write_assignments(plan.new_assignments)
        except SQLAlchemyError as exc:
            logger.error(
                "Week copy into %s failed after deleting %d rows: %s",
                plan.target.start.isoformat(),
                result.deleted_count,
                exc,
            )
            raise WeekCopyError(
                f"Failed to copy schedules into week of {plan.target.start.isoformat()}",
                deleted_count=result.deleted_count,
            ) from exc
        result.copied_count = len(plan.new_assignments)
        return result

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def upsert_unavailability(self, record: Unavailability) -> Unavailability:
        """Insert the record, or overwrite the member's existing one for that date.

        Overwriting an unrestricted record clears any earlier time window.

        Raises:
            AvailabilityConflictError: If a concurrent insert won the race.
        """
        row = self.session.scalars(
            select(UnavailabilityRow).where(
                UnavailabilityRow.store_id == record.store_id,
                UnavailabilityRow.member_id == record.member_id,
                UnavailabilityRow.date == record.date,
            )
        ).one_or_none()
        if row is None:
            row = UnavailabilityRow(
                store_id=record.store_id, member_id=record.member_id, date=record.date
            )
            self.session.add(row)
        row.reason = record.reason
        row.has_time_restriction = record.has_time_restriction
        row.start_time = record.start_time if record.has_time_restriction else None
        row.end_time = record.end_time if record.has_time_restriction else None
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise AvailabilityConflictError(
                record.member_id,
                f"Member {record.member_id} is already unavailable on {record.date.isoformat()}",
            ) from exc
        return _to_unavailability(row)

    def delete_unavailability(self, store_id: str, member_id: str, d: datetime.date) -> int:
        result = self.session.execute(
            delete(UnavailabilityRow).where(
                UnavailabilityRow.store_id == store_id,
                UnavailabilityRow.member_id == member_id,
                UnavailabilityRow.date == d,
            )
        )
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Store setup (demo data and tests)
    # ------------------------------------------------------------------

    def add_store(self, name: str, store_id: Optional[str] = None, archived: bool = False) -> Store:
        row = StoreRow(name=name, archived=archived)
        if store_id:
            row.id = store_id
        self.session.add(row)
        self.session.flush()
        return Store(id=row.id, name=row.name, archived=row.archived)

    def add_role(self, store_id: str, name: str, code: Optional[str] = None, role_id: Optional[str] = None) -> JobRole:
        row = JobRoleRow(store_id=store_id, name=name, code=code)
        if role_id:
            row.id = role_id
        self.session.add(row)
        self.session.flush()
        return JobRole(id=row.id, store_id=store_id, code=code, name=name)

    def add_member(
        self,
        store_id: str,
        name: str,
        role_ids: Iterable[str] = (),
        member_id: Optional[str] = None,
        user_id: Optional[str] = None,
        active: bool = True,
    ) -> Member:
        row = MemberRow(
            store_id=store_id,
            name=name,
            user_id=user_id,
            is_guest=user_id is None,
            active=active,
        )
        if member_id:
            row.id = member_id
        self.session.add(row)
        self.session.flush()
        roles = set(role_ids)
        if roles:
            self.session.execute(
                insert(member_job_roles),
                [{"member_id": row.id, "job_role_id": role_id} for role_id in sorted(roles)],
            )
        return Member(
            id=row.id,
            store_id=store_id,
            name=name,
            user_id=user_id,
            active=active,
            is_guest=row.is_guest,
            role_ids=roles,
        )

    def add_work_item(self, item: WorkItem) -> WorkItem:
        row = WorkItemRow(
            id=item.id,
            store_id=item.store_id,
            name=item.name,
            start_min=item.start_min,
            end_min=item.end_min,
            unpaid_break_min=item.unpaid_break_min,
            max_headcount=item.max_headcount,
            role_hint=item.role_hint,
        )
        self.session.add(row)
        self.session.flush()
        return _to_work_item(row)

    def add_required_role(self, requirement: RequiredRole) -> RequiredRole:
        self.session.add(
            WorkItemRequiredRoleRow(
                work_item_id=requirement.work_item_id,
                job_role_id=requirement.job_role_id,
                min_count=requirement.min_count,
            )
        )
        self.session.flush()
        return requirement

    def set_business_hour(self, hour: BusinessHour) -> BusinessHour:
        """Insert or replace the hours of one weekday."""
        row = self.session.scalars(
            select(BusinessHourRow).where(
                BusinessHourRow.store_id == hour.store_id,
                BusinessHourRow.weekday == hour.weekday,
            )
        ).first()
        if row is None:
            row = BusinessHourRow(store_id=hour.store_id, weekday=hour.weekday)
            self.session.add(row)
        row.open_min = hour.open_min
        row.close_min = hour.close_min
        self.session.flush()
        return hour

"""Domain models for the scheduling core.

This module contains the plain data structures every scheduling component
works on: stores, job roles, members, work items and their role
requirements, business hours, unavailability records and schedule
assignments. They carry no persistence behaviour; the persistence layer
converts its rows into these objects before the core sees them.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from storeshift.domain.timeutils import (
    MINUTES_PER_DAY,
    format_hhmm,
    normalize_close_min,
)


class AssignmentStatus(Enum):
    """Lifecycle states of a schedule assignment."""

    ASSIGNED = "ASSIGNED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    @property
    def is_active(self) -> bool:
        """Whether the assignment still occupies the member that day."""
        return self is not AssignmentStatus.CANCELLED


@dataclass
class Store:
    """Tenant boundary that owns every other entity.

    Attributes:
        id: Unique identifier for the store.
        name: Display name.
        archived: Soft-delete flag; archived stores cannot be scheduled.
    """

    id: str
    name: str
    archived: bool = False


@dataclass(frozen=True)
class JobRole:
    """A labeled capability (e.g. "barista") used as a staffing requirement.

    Attributes:
        id: Unique identifier for the role.
        store_id: Owning store.
        code: Short code, preferred over the name in messages.
        name: Display name.
        active: Deactivated roles keep their historical assignments.
    """

    id: str
    store_id: str
    code: Optional[str]
    name: str
    active: bool = True

    @property
    def label(self) -> str:
        """Code if set, otherwise the name."""
        return self.code or self.name


@dataclass
class Member:
    """A person's membership in a store.

    Attributes:
        id: Unique identifier for the membership row.
        store_id: Owning store.
        name: Display name.
        user_id: Backing account, None for guests.
        active: Inactive members are never scheduled.
        is_guest: True if the member has no backing account.
        role_ids: IDs of the job roles this member holds.
    """

    id: str
    store_id: str
    name: str
    user_id: Optional[str] = None
    active: bool = True
    is_guest: bool = False
    role_ids: set[str] = field(default_factory=set)


@dataclass
class WorkItem:
    """A reusable shift template bounded to one day.

    Attributes:
        id: Unique identifier.
        store_id: Owning store.
        name: Display name (e.g. "Opening").
        start_min: Start as minutes from midnight.
        end_min: End as minutes from midnight (exclusive, up to 1440).
        unpaid_break_min: Unpaid break taken during the shift.
        max_headcount: Intended maximum staff for the slot.
        role_hint: Free-text role hint shown to managers.
    """

    id: str
    store_id: str
    name: str
    start_min: int
    end_min: int
    unpaid_break_min: int = 0
    max_headcount: int = 1
    role_hint: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.start_min < self.end_min <= MINUTES_PER_DAY:
            raise ValueError(
                f"Work item {self.id}: end ({self.end_min}) must be greater than "
                f"start ({self.start_min}) and both within [0, {MINUTES_PER_DAY}]"
            )
        if not 0 <= self.unpaid_break_min <= self.duration_minutes:
            raise ValueError(
                f"Work item {self.id}: unpaid break of {self.unpaid_break_min} "
                f"minutes does not fit the shift"
            )
        if self.max_headcount < 1:
            raise ValueError(f"Work item {self.id}: max_headcount must be >= 1")

    @property
    def start_time(self) -> str:
        return format_hhmm(self.start_min)

    @property
    def end_time(self) -> str:
        return format_hhmm(self.end_min)

    @property
    def duration_minutes(self) -> int:
        return self.end_min - self.start_min


@dataclass(frozen=True)
class RequiredRole:
    """Minimum headcount of one role for one work item."""

    work_item_id: str
    job_role_id: str
    min_count: int = 1

    def __post_init__(self) -> None:
        if self.min_count < 1:
            raise ValueError("min_count must be at least 1")


@dataclass(frozen=True)
class BusinessHour:
    """Opening hours of a store on one weekday.

    Attributes:
        store_id: Owning store.
        weekday: 0=Sunday..6=Saturday.
        open_min: Opening time as minutes from midnight.
        close_min: Closing time; 0 means midnight.
    """

    store_id: str
    weekday: int
    open_min: int
    close_min: int

    @property
    def effective_close_min(self) -> int:
        return normalize_close_min(self.close_min)

    @property
    def open_time(self) -> str:
        return format_hhmm(self.open_min)

    @property
    def close_time(self) -> str:
        return format_hhmm(self.effective_close_min)


@dataclass(frozen=True)
class Unavailability:
    """A date on which a member declared they cannot work.

    The optional time window is informational. Scheduling treats every
    record as covering the whole day.

    Attributes:
        store_id: Owning store.
        member_id: Member who is unavailable.
        date: The unavailable date.
        reason: Free-text reason.
        has_time_restriction: True if only part of the day is blocked.
        start_time: ``HH:MM`` start of the blocked window, if restricted.
        end_time: ``HH:MM`` end of the blocked window, if restricted.
    """

    store_id: str
    member_id: str
    date: date
    reason: Optional[str] = None
    has_time_restriction: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def __post_init__(self) -> None:
        if self.has_time_restriction and (self.start_time is None or self.end_time is None):
            raise ValueError("A time-restricted unavailability needs start_time and end_time")


@dataclass
class Assignment:
    """A member placed on a work item for a specific date.

    Attributes:
        store_id: Owning store.
        member_id: Assigned member.
        work_item_id: Work item being filled.
        date: Calendar date of the shift.
        start_time: ``HH:MM`` start.
        end_time: ``HH:MM`` end; earlier than start means overnight.
        status: Lifecycle status.
        notes: Free-text notes carried along by week copies.
        created_by: Actor stamp for auditing.
        id: Persistence ID, None until stored.
    """

    store_id: str
    member_id: str
    work_item_id: str
    date: date
    start_time: str
    end_time: str
    status: AssignmentStatus = AssignmentStatus.ASSIGNED
    notes: Optional[str] = None
    created_by: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def __repr__(self) -> str:
        return (
            f"Assignment({self.member_id} -> {self.work_item_id} on "
            f"{self.date.isoformat()} {self.start_time}-{self.end_time}, "
            f"{self.status.value})"
        )


@dataclass
class StoreSnapshot:
    """Everything the core needs about one store for one date range.

    Built by the persistence layer per request; the core never caches it.
    Lists are in stable (creation) order, which the auto-assigner relies on.
    """

    store: Store
    roles: list[JobRole] = field(default_factory=list)
    members: list[Member] = field(default_factory=list)
    work_items: list[WorkItem] = field(default_factory=list)
    required_roles: list[RequiredRole] = field(default_factory=list)
    business_hours: list[BusinessHour] = field(default_factory=list)
    unavailability: list[Unavailability] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)

    @property
    def roles_by_id(self) -> dict[str, JobRole]:
        return {role.id: role for role in self.roles}

    @property
    def members_by_id(self) -> dict[str, Member]:
        return {member.id: member for member in self.members}

    @property
    def work_items_by_id(self) -> dict[str, WorkItem]:
        return {item.id: item for item in self.work_items}

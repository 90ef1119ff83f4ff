"""Request objects accepted by the scheduling service.

Each request validates its own shape in ``validate()`` and raises
``InputValidationError`` before the service opens a transaction.
"""

import datetime
from dataclasses import dataclass, field
from typing import Optional, Union

from storeshift.errors import InputValidationError


def parse_date(value: Union[str, datetime.date, None], field_name: str) -> datetime.date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime.date):
        return value
    if not value:
        raise InputValidationError(f"{field_name} is required", field=field_name)
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as exc:
        raise InputValidationError(
            f"{field_name} must be YYYY-MM-DD, got {value!r}", field=field_name
        ) from exc


def _require_store(store_id: str) -> None:
    if not store_id:
        raise InputValidationError("store_id is required", field="store_id")


@dataclass
class AutoAssignRequest:
    """Fill open slots for a date range, optionally for a single cell.

    Attributes:
        store_id: Store to schedule.
        date_from: First date (inclusive).
        date_to: Last date (inclusive).
        member_id: Restrict picks to this member.
        date: Restrict the run to this date.
        actor: Stamp for ``created_by``.
    """

    store_id: str
    date_from: datetime.date
    date_to: datetime.date
    member_id: Optional[str] = None
    date: Optional[datetime.date] = None
    actor: Optional[str] = None

    def validate(self) -> None:
        _require_store(self.store_id)
        self.date_from = parse_date(self.date_from, "date_from")
        self.date_to = parse_date(self.date_to, "date_to")
        if self.date_to < self.date_from:
            raise InputValidationError("date_to must not be before date_from", field="date_to")
        if self.date is not None:
            self.date = parse_date(self.date, "date")


@dataclass
class CoverageRequest:
    """Check role coverage of work items against assigned members."""

    store_id: str
    work_item_ids: list[str] = field(default_factory=list)
    assigned_member_ids: list[str] = field(default_factory=list)
    locale: str = "en"

    def validate(self) -> None:
        _require_store(self.store_id)
        if not self.work_item_ids:
            raise InputValidationError("work_item_ids must not be empty", field="work_item_ids")
        self.work_item_ids = list(self.work_item_ids)
        self.assigned_member_ids = list(self.assigned_member_ids or [])


@dataclass
class CopyWeekRequest:
    """Copy one week's schedule onto another week.

    Both dates may be any day of their week; they are normalized to the
    week start.
    """

    store_id: str
    source_week_start: datetime.date
    target_week_start: datetime.date
    actor: Optional[str] = None

    def validate(self) -> None:
        _require_store(self.store_id)
        self.source_week_start = parse_date(self.source_week_start, "source_week_start")
        self.target_week_start = parse_date(self.target_week_start, "target_week_start")

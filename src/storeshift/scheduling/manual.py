"""Rules for manual assignment and unavailability changes.

A member cannot hold an ASSIGNED assignment and an unavailability record
for the same date; whichever is created second is rejected. A manual
assignment that collides with an existing ASSIGNED row for the same member
and date replaces that row rather than merging with it.
"""

from datetime import date
from typing import Iterable

from storeshift.domain.models import Assignment, AssignmentStatus, Unavailability
from storeshift.domain.timeutils import format_hhmm, parse_hhmm
from storeshift.errors import AvailabilityConflictError, InputValidationError


def validate_shift_times(start_time: str, end_time: str) -> tuple[str, str]:
    """Reject malformed or zero-length shift times.

    An end earlier than the start is allowed and means an overnight shift.

    Returns:
        The times rewritten as zero-padded ``HH:MM``.
    """
    try:
        start = parse_hhmm(start_time)
        end = parse_hhmm(end_time)
    except ValueError as exc:
        raise InputValidationError(str(exc), field="start_time/end_time") from exc
    if start == end:
        raise InputValidationError("Shift start and end cannot be equal", field="end_time")
    return format_hhmm(start), format_hhmm(end)


def validate_time_window(start_time: str, end_time: str) -> tuple[str, str]:
    """Validate a same-day ``HH:MM`` window whose end is after its start."""
    try:
        start = parse_hhmm(start_time)
        end = parse_hhmm(end_time)
    except ValueError as exc:
        raise InputValidationError(str(exc), field="start_time/end_time") from exc
    if end <= start:
        raise InputValidationError("Window end must be after its start", field="end_time")
    return format_hhmm(start), format_hhmm(end)


def ensure_available(
    member_id: str,
    schedule_date: date,
    unavailability: Iterable[Unavailability],
) -> None:
    """Raise if the member declared the date unavailable."""
    for record in unavailability:
        if record.member_id == member_id and record.date == schedule_date:
            raise AvailabilityConflictError(
                member_id, f"Member {member_id} is unavailable on {schedule_date.isoformat()}"
            )


def ensure_not_assigned(
    member_id: str,
    schedule_date: date,
    assignments: Iterable[Assignment],
) -> None:
    """Raise if the member already holds an ASSIGNED row that date."""
    if replaced_assignments(assignments, member_id, schedule_date):
        raise AvailabilityConflictError(
            member_id,
            f"Member {member_id} is already assigned on {schedule_date.isoformat()}",
        )


def replaced_assignments(
    assignments: Iterable[Assignment],
    member_id: str,
    schedule_date: date,
) -> list[Assignment]:
    """ASSIGNED rows a new manual assignment for member/date would replace."""
    return [
        a
        for a in assignments
        if a.member_id == member_id
        and a.date == schedule_date
        and a.status is AssignmentStatus.ASSIGNED
    ]

"""Exceptions raised by the scheduling service.

Only violated preconditions and storage failures are exceptions. Expected
negative outcomes (an unfillable slot, insufficient role coverage, an empty
week copy) come back as result objects instead.
"""

from typing import Optional


class StoreShiftError(Exception):
    """Base class for all scheduling errors."""


class InputValidationError(StoreShiftError, ValueError):
    """A request was rejected before any scheduling logic ran."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(StoreShiftError, LookupError):
    """A referenced entity does not exist in the store."""


class StoreNotFoundError(NotFoundError):
    """The store does not exist or has been archived."""

    def __init__(self, store_id: str):
        super().__init__(f"Store {store_id} not found")
        self.store_id = store_id


class AvailabilityConflictError(StoreShiftError):
    """A member cannot be assigned and unavailable on the same date."""

    def __init__(self, member_id: str, message: str):
        super().__init__(message)
        self.member_id = member_id


class AssignmentConflictError(StoreShiftError):
    """Writing an assignment would double-book a member.

    Raised when the storage layer's uniqueness guard on
    (store, member, date, ASSIGNED) rejects an insert, typically because a
    concurrent request assigned the same member first.
    """


class WeekCopyError(StoreShiftError):
    """A week copy failed while writing the target week.

    Fatal: callers must not retry automatically.
    """

    def __init__(self, message: str, deleted_count: int = 0):
        super().__init__(message)
        self.deleted_count = deleted_count

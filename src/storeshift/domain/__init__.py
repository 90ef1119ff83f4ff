"""Domain models and business rules for scheduling."""

from storeshift.domain.config import SchedulingConfig
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
from storeshift.domain.policies import BusinessHoursTimePolicy, ShiftTimePolicy

__all__ = [
    # Models
    "Assignment",
    "AssignmentStatus",
    "BusinessHour",
    "JobRole",
    "Member",
    "RequiredRole",
    "Store",
    "StoreSnapshot",
    "Unavailability",
    "WorkItem",
    # Policies
    "BusinessHoursTimePolicy",
    "ShiftTimePolicy",
    # Configuration
    "SchedulingConfig",
]

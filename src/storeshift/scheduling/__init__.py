"""Scheduling engine: candidate pools, auto-assignment and week copies."""

from storeshift.scheduling.auto_assigner import AutoAssigner, AutoAssignResult
from storeshift.scheduling.candidate_pool import CandidatePoolBuilder
from storeshift.scheduling.week_copy import (
    WeekCopyPlan,
    WeekCopyPlanner,
    WeekCopyResult,
    WeekRange,
)

__all__ = [
    "AutoAssigner",
    "AutoAssignResult",
    "CandidatePoolBuilder",
    "WeekCopyPlan",
    "WeekCopyPlanner",
    "WeekCopyResult",
    "WeekRange",
]

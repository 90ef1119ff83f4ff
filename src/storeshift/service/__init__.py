"""Service layer: request objects and transactional scheduling operations."""

from storeshift.service.requests import (
    AutoAssignRequest,
    CopyWeekRequest,
    CoverageRequest,
    parse_date,
)
from storeshift.service.scheduling_service import SchedulingService

__all__ = [
    "AutoAssignRequest",
    "CopyWeekRequest",
    "CoverageRequest",
    "SchedulingService",
    "parse_date",
]

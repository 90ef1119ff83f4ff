"""Relational storage for stores, staffing data and assignments."""

from storeshift.persistence.repository import ScheduleRepository
from storeshift.persistence.tables import (
    Base,
    create_db_engine,
    create_session_factory,
    init_database,
)

__all__ = [
    "Base",
    "ScheduleRepository",
    "create_db_engine",
    "create_session_factory",
    "init_database",
]

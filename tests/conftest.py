"""Shared fixtures: an in-memory schedule database with one seeded store."""

import pytest

from storeshift.domain.config import SchedulingConfig
from storeshift.domain.models import RequiredRole, WorkItem
from storeshift.persistence.repository import ScheduleRepository
from storeshift.persistence.tables import create_db_engine, create_session_factory, init_database
from storeshift.service.scheduling_service import SchedulingService


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def service(session_factory):
    return SchedulingService(session_factory, SchedulingConfig(database_url="sqlite://"))


@pytest.fixture
def store(session_factory):
    """Store s1: baristas m1 and m2, cashier m3.

    Work item w1 (09:00-18:00, 60 min break) needs a barista; w2
    (14:00-22:00) needs a cashier.
    """
    with session_factory.begin() as session:
        repo = ScheduleRepository(session)
        repo.add_store("Corner Cafe", store_id="s1")
        repo.add_role("s1", "Barista", code="BAR", role_id="r-bar")
        repo.add_role("s1", "Cashier", code="CSH", role_id="r-csh")
        repo.add_member("s1", "Alice", role_ids={"r-bar"}, member_id="m1", user_id="u1")
        repo.add_member("s1", "Bob", role_ids={"r-bar"}, member_id="m2", user_id="u2")
        repo.add_member("s1", "Carol", role_ids={"r-csh"}, member_id="m3")
        repo.add_work_item(
            WorkItem(id="w1", store_id="s1", name="Day", start_min=540, end_min=1080, unpaid_break_min=60)
        )
        repo.add_work_item(WorkItem(id="w2", store_id="s1", name="Evening", start_min=840, end_min=1320))
        repo.add_required_role(RequiredRole("w1", "r-bar", min_count=1))
        repo.add_required_role(RequiredRole("w2", "r-csh", min_count=1))
    return "s1"

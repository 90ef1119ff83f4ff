"""Tests for the first-fit auto-assigner."""

from datetime import date

import pytest

from storeshift.domain.models import (
    AssignmentStatus,
    BusinessHour,
    Member,
    RequiredRole,
    Store,
    StoreSnapshot,
    Unavailability,
    WorkItem,
)
from storeshift.domain.policies import BusinessHoursTimePolicy
from storeshift.scheduling.auto_assigner import AutoAssigner

MONDAY = date(2024, 6, 3)
SUNDAY = date(2024, 6, 9)


def _snapshot(members, work_items, **kwargs) -> StoreSnapshot:
    return StoreSnapshot(
        store=Store(id="s1", name="Test Store"),
        members=members,
        work_items=work_items,
        **kwargs,
    )


def _item(item_id: str, start: int = 540, end: int = 1080, **kwargs) -> WorkItem:
    return WorkItem(id=item_id, store_id="s1", name=item_id, start_min=start, end_min=end, **kwargs)


class TestAutoAssigner:
    """Tests for AutoAssigner."""

    @pytest.fixture
    def assigner(self):
        return AutoAssigner()

    def test_barista_scenario(self, assigner):
        """The unavailable barista is skipped and the other one assigned."""
        snapshot = _snapshot(
            members=[
                Member("m1", "s1", "Alice", role_ids={"barista"}),
                Member("m2", "s1", "Bob", role_ids={"barista"}),
            ],
            work_items=[_item("w1")],
            required_roles=[RequiredRole("w1", "barista", min_count=1)],
            unavailability=[Unavailability("s1", "m1", MONDAY)],
        )

        result = assigner.assign(snapshot, MONDAY, MONDAY)

        assert result.created_count == 1
        created = result.assignments[0]
        assert created.member_id == "m2"
        assert created.work_item_id == "w1"
        assert created.date == MONDAY
        assert (created.start_time, created.end_time) == ("09:00", "18:00")
        assert created.status is AssignmentStatus.ASSIGNED

    def test_no_double_booking_within_run(self, assigner):
        members = [Member(f"m{i}", "s1", f"M{i}") for i in range(2)]
        snapshot = _snapshot(members, [_item("w1"), _item("w2"), _item("w3")])

        result = assigner.assign(snapshot, MONDAY, SUNDAY)

        seen = set()
        for a in result.assignments:
            key = (a.member_id, a.date)
            assert key not in seen
            seen.add(key)
        # Two members can fill two of three items each day
        assert result.created_count == 14
        assert len(result.unfilled_slots) == 7

    def test_rerun_on_full_range_creates_nothing(self, assigner):
        members = [Member("m1", "s1", "A"), Member("m2", "s1", "B")]
        snapshot = _snapshot(members, [_item("w1"), _item("w2")])

        first = assigner.assign(snapshot, MONDAY, SUNDAY)
        assert first.created_count == 14

        snapshot.assignments = first.assignments
        second = assigner.assign(snapshot, MONDAY, SUNDAY)
        assert second.created_count == 0
        assert len(second.skipped_slots) == 14

    def test_partially_filled_day_is_completed(self, assigner):
        members = [Member("m1", "s1", "A"), Member("m2", "s1", "B")]
        snapshot = _snapshot(members, [_item("w1"), _item("w2")])
        first = assigner.assign(snapshot, MONDAY, MONDAY, target_member_id="m2")
        assert [(a.member_id, a.work_item_id) for a in first.assignments] == [("m2", "w1")]

        snapshot.assignments = first.assignments
        second = assigner.assign(snapshot, MONDAY, MONDAY)
        assert [(a.member_id, a.work_item_id) for a in second.assignments] == [("m1", "w2")]

    def test_first_fit_is_stable(self, assigner):
        members = [Member("m1", "s1", "A"), Member("m2", "s1", "B"), Member("m3", "s1", "C")]
        snapshot = _snapshot(members, [_item("w1"), _item("w2")])

        runs = [
            [(a.member_id, a.work_item_id) for a in assigner.assign(snapshot, MONDAY, MONDAY).assignments]
            for _ in range(3)
        ]
        assert runs[0] == [("m1", "w1"), ("m2", "w2")]
        assert runs[0] == runs[1] == runs[2]

    def test_unfillable_slot_is_not_an_error(self, assigner):
        snapshot = _snapshot(
            [Member("m1", "s1", "A", role_ids={"cashier"})],
            [_item("w1")],
            required_roles=[RequiredRole("w1", "barista")],
        )
        result = assigner.assign(snapshot, MONDAY, MONDAY)
        assert result.created_count == 0
        assert result.unfilled_slots == [("w1", MONDAY)]

    def test_max_headcount_not_consulted(self, assigner):
        """A slot gets at most one member per run whatever its headcount."""
        members = [Member(f"m{i}", "s1", f"M{i}") for i in range(3)]
        snapshot = _snapshot(members, [_item("w1", max_headcount=3)])
        result = assigner.assign(snapshot, MONDAY, MONDAY)
        assert result.created_count == 1

    def test_times_from_business_hours(self, assigner):
        snapshot = _snapshot(
            [Member("m1", "s1", "A")],
            [_item("w1")],
            business_hours=[
                BusinessHour("s1", weekday=1, open_min=420, close_min=1320),
                BusinessHour("s1", weekday=6, open_min=600, close_min=0),
            ],
        )
        result = assigner.assign(snapshot, MONDAY, SUNDAY)
        times = {a.date: (a.start_time, a.end_time) for a in result.assignments}

        assert times[MONDAY] == ("07:00", "22:00")
        assert times[date(2024, 6, 8)] == ("10:00", "24:00")
        assert times[date(2024, 6, 5)] == ("09:00", "18:00")

    def test_configured_default_times(self):
        assigner = AutoAssigner(default_start="08:30", default_end="17:00")
        snapshot = _snapshot([Member("m1", "s1", "A")], [_item("w1")])
        created = assigner.assign(snapshot, MONDAY, MONDAY).assignments[0]
        assert (created.start_time, created.end_time) == ("08:30", "17:00")

    def test_explicit_time_policy(self):
        policy = BusinessHoursTimePolicy(default_start="06:00", default_end="14:00")
        assigner = AutoAssigner(time_policy=policy)
        snapshot = _snapshot([Member("m1", "s1", "A")], [_item("w1")])
        created = assigner.assign(snapshot, MONDAY, MONDAY).assignments[0]
        assert (created.start_time, created.end_time) == ("06:00", "14:00")

    def test_single_cell(self, assigner):
        """Target member and target date restrict the run to one cell."""
        members = [Member("m1", "s1", "A"), Member("m2", "s1", "B")]
        snapshot = _snapshot(members, [_item("w1"), _item("w2")])

        result = assigner.assign(
            snapshot, MONDAY, SUNDAY, target_date=date(2024, 6, 5), target_member_id="m2"
        )

        assert [(a.member_id, a.work_item_id, a.date) for a in result.assignments] == [
            ("m2", "w1", date(2024, 6, 5))
        ]
        assert result.unfilled_slots == [("w2", date(2024, 6, 5))]

    def test_actor_stamped(self, assigner):
        snapshot = _snapshot([Member("m1", "s1", "A")], [_item("w1")])
        result = assigner.assign(snapshot, MONDAY, MONDAY, actor="manager-7")
        assert result.assignments[0].created_by == "manager-7"

    def test_inactive_member_never_picked(self, assigner):
        snapshot = _snapshot(
            [Member("m1", "s1", "A", active=False), Member("m2", "s1", "B")],
            [_item("w1")],
        )
        result = assigner.assign(snapshot, MONDAY, MONDAY)
        assert result.assignments[0].member_id == "m2"

    def test_reversed_range_rejected(self, assigner):
        snapshot = _snapshot([Member("m1", "s1", "A")], [_item("w1")])
        with pytest.raises(ValueError):
            assigner.assign(snapshot, SUNDAY, MONDAY)

    def test_summary(self, assigner):
        snapshot = _snapshot([Member("m1", "s1", "A")], [_item("w1"), _item("w2")])
        summary = assigner.assign(snapshot, MONDAY, MONDAY).get_summary()
        assert summary == {"created_count": 1, "unfilled_count": 1, "skipped_count": 0}

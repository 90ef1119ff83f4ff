"""Candidate pool builder for filling work item slots.

This module determines which members may fill a (work item, date) slot,
respecting role requirements, declared unavailability and existing
assignments. Lookup structures are built once per invocation and are not
modified afterwards; the auto-assigner keeps its own running exclusions.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from storeshift.domain.models import (
    Assignment,
    Member,
    RequiredRole,
    Unavailability,
    WorkItem,
)
from storeshift.domain.timeutils import slot_key


class CandidatePoolBuilder:
    """Builds candidate pools for work item slots.

    A work item without required roles accepts every active member. A work
    item with required roles accepts the union of the members holding any
    one of them, so a member with role A qualifies for an "A or B" item even
    without B. Members unavailable or already assigned on the date are
    removed, and a target member narrows the pool to that member alone.

    Pool order follows the order of ``members``, which callers supply in a
    stable (creation) order so repeated runs pick the same candidates.

    Example:
        >>> builder = CandidatePoolBuilder(members, required_roles, unavailable, existing)
        >>> builder.pool_for(work_item, date(2024, 6, 3))
        ['m2']
    """

    def __init__(
        self,
        members: Iterable[Member],
        required_roles: Iterable[RequiredRole] = (),
        unavailability: Iterable[Unavailability] = (),
        assignments: Iterable[Assignment] = (),
    ):
        self.member_order: tuple[str, ...] = tuple(
            m.id for m in members if m.active
        )
        active_ids = set(self.member_order)

        role_to_members: dict[str, set[str]] = defaultdict(set)
        for member in members:
            if member.id not in active_ids:
                continue
            for role_id in member.role_ids:
                role_to_members[role_id].add(member.id)
        self.role_to_members: dict[str, frozenset[str]] = {
            role_id: frozenset(ids) for role_id, ids in role_to_members.items()
        }

        required_by_item: dict[str, list[str]] = defaultdict(list)
        for req in required_roles:
            if req.job_role_id not in required_by_item[req.work_item_id]:
                required_by_item[req.work_item_id].append(req.job_role_id)
        self.required_by_item: dict[str, tuple[str, ...]] = {
            item_id: tuple(roles) for item_id, roles in required_by_item.items()
        }

        self.unavailable: frozenset[str] = frozenset(
            slot_key(u.member_id, u.date) for u in unavailability
        )
        self.assigned: frozenset[str] = frozenset(
            slot_key(a.member_id, a.date) for a in assignments if a.is_active
        )

    def required_role_ids(self, work_item: WorkItem) -> tuple[str, ...]:
        """Role IDs the work item requires (empty if unconstrained)."""
        return self.required_by_item.get(work_item.id, ())

    def role_pool(self, work_item: WorkItem) -> list[str]:
        """Members qualified by role alone, before date exclusions."""
        roles = self.required_role_ids(work_item)
        if not roles:
            return list(self.member_order)

        qualified: set[str] = set()
        for role_id in roles:
            qualified |= self.role_to_members.get(role_id, frozenset())
        return [member_id for member_id in self.member_order if member_id in qualified]

    def is_excluded(self, member_id: str, schedule_date: date) -> bool:
        """Whether the member is unavailable or already assigned that date."""
        key = slot_key(member_id, schedule_date)
        return key in self.unavailable or key in self.assigned

    def pool_for(
        self,
        work_item: WorkItem,
        schedule_date: date,
        target_member_id: Optional[str] = None,
    ) -> list[str]:
        """Eligible members for a work item on a date.

        Args:
            work_item: The work item to fill.
            schedule_date: Date of the slot.
            target_member_id: If given, only this member may be returned.

        Returns:
            Ordered list of eligible member IDs.
        """
        pool = self.role_pool(work_item)
        if target_member_id is not None:
            pool = [m for m in pool if m == target_member_id]
        return [m for m in pool if not self.is_excluded(m, schedule_date)]

"""Role coverage validation for proposed or committed assignments.

Given the role requirements of one or more work items and the members
assigned to them, this module computes how many qualifying members each
required role has and whether every minimum is met. Insufficient coverage
is a normal, structured result, not an exception.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from storeshift.domain.models import JobRole, RequiredRole

DEFAULT_LOCALE = "en"

# locale -> (all satisfied, no requirements, prefix, per-role format)
MESSAGE_TEMPLATES: dict[str, tuple[str, str, str, str]] = {
    "en": (
        "All role requirements are satisfied.",
        "No role requirements found.",
        "Insufficient role coverage: ",
        "{role}: {current}/{required} people",
    ),
    "ko": (
        "모든 역할 요구 사항이 충족되었습니다.",
        "역할 요구 사항이 없습니다.",
        "역할 인원 부족: ",
        "{role}: {current}/{required}명",
    ),
    "ja": (
        "すべての役割要件が満たされています。",
        "役割要件がありません。",
        "役割人員不足: ",
        "{role}: {current}/{required}人",
    ),
}


@dataclass(frozen=True)
class RoleCoverage:
    """Coverage of a single required role."""

    role_id: str
    role_name: str
    role_code: Optional[str]
    required_count: int
    current_count: int

    @property
    def is_sufficient(self) -> bool:
        return self.current_count >= self.required_count

    @property
    def label(self) -> str:
        return self.role_code or self.role_name

    def to_dict(self) -> dict:
        return {
            "role_id": self.role_id,
            "role_name": self.role_name,
            "role_code": self.role_code,
            "required_count": self.required_count,
            "current_count": self.current_count,
            "is_sufficient": self.is_sufficient,
        }


@dataclass
class CoverageReport:
    """Result of validating role coverage."""

    role_coverage: list[RoleCoverage] = field(default_factory=list)
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return all(c.is_sufficient for c in self.role_coverage)

    @property
    def insufficient_roles(self) -> list[RoleCoverage]:
        return [c for c in self.role_coverage if not c.is_sufficient]

    def insufficient_summary(self) -> list[tuple[str, int, int]]:
        """Language-neutral ``(role, current, required)`` tuples."""
        return [(c.label, c.current_count, c.required_count) for c in self.insufficient_roles]

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "role_coverage": [c.to_dict() for c in self.role_coverage],
            "insufficient_roles": [c.to_dict() for c in self.insufficient_roles],
            "message": self.message,
        }


def format_coverage_message(report: CoverageReport, locale: str = DEFAULT_LOCALE) -> str:
    """Render a report as a user-facing sentence in the given locale."""
    satisfied, empty, prefix, item = MESSAGE_TEMPLATES.get(
        locale, MESSAGE_TEMPLATES[DEFAULT_LOCALE]
    )
    if not report.role_coverage:
        return empty
    if report.is_valid:
        return satisfied
    parts = [
        item.format(role=role, current=current, required=required)
        for role, current, required in report.insufficient_summary()
    ]
    return prefix + ", ".join(parts)


def aggregate_requirements(requirements: Iterable[RequiredRole]) -> dict[str, int]:
    """Collapse requirements from several work items into role -> min count.

    When more than one work item requires the same role, the largest
    minimum wins; a later, smaller requirement never lowers it. Roles keep
    the order they first appear in.
    """
    aggregated: dict[str, int] = {}
    for req in requirements:
        aggregated[req.job_role_id] = max(aggregated.get(req.job_role_id, 0), req.min_count)
    return aggregated


class RoleCoverageValidator:
    """Validates assigned members against per-role minimum headcounts.

    Every assigned member increments the count of each required role they
    hold, so a member with two qualifying roles counts toward both.

    Example:
        >>> validator = RoleCoverageValidator()
        >>> report = validator.validate(requirements, roles_by_id, member_roles, ["m1", "m2"])
        >>> report.is_valid
        True
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale

    def count_roles(
        self,
        required_role_ids: Iterable[str],
        member_roles: Mapping[str, Iterable[str]],
        assigned_member_ids: Iterable[str],
    ) -> dict[str, int]:
        """Count qualifying assigned members per required role.

        A member listed more than once is counted once.
        """
        required = set(required_role_ids)
        counts = {role_id: 0 for role_id in required}
        seen: set[str] = set()
        for member_id in assigned_member_ids:
            if member_id in seen:
                continue
            seen.add(member_id)
            for role_id in set(member_roles.get(member_id, ())):
                if role_id in required:
                    counts[role_id] += 1
        return counts

    def validate(
        self,
        requirements: Iterable[RequiredRole],
        roles_by_id: Mapping[str, JobRole],
        member_roles: Mapping[str, Iterable[str]],
        assigned_member_ids: Iterable[str],
        locale: Optional[str] = None,
    ) -> CoverageReport:
        """Compute per-role coverage.

        Args:
            requirements: Required-role rows of the work items under evaluation.
            roles_by_id: Store job roles, used for names and codes.
            member_roles: Member ID -> role IDs held.
            assigned_member_ids: Members currently or proposed to be assigned.
            locale: Message locale, defaults to the validator's locale.

        Returns:
            CoverageReport; valid when there are no requirements.
        """
        minimums = aggregate_requirements(requirements)
        counts = self.count_roles(minimums, member_roles, assigned_member_ids)

        report = CoverageReport()
        for role_id, min_count in minimums.items():
            role = roles_by_id.get(role_id)
            report.role_coverage.append(
                RoleCoverage(
                    role_id=role_id,
                    role_name=role.name if role else role_id,
                    role_code=role.code if role else None,
                    required_count=min_count,
                    current_count=counts.get(role_id, 0),
                )
            )
        report.message = format_coverage_message(report, locale or self.locale)
        return report

"""Tests for role coverage validation."""

import pytest

from storeshift.domain.models import JobRole, RequiredRole
from storeshift.validation.role_coverage import (
    CoverageReport,
    RoleCoverageValidator,
    aggregate_requirements,
    format_coverage_message,
)


class TestRoleCoverageValidator:
    """Tests for RoleCoverageValidator."""

    @pytest.fixture
    def validator(self):
        return RoleCoverageValidator()

    @pytest.fixture
    def roles_by_id(self):
        return {
            "r-bar": JobRole("r-bar", "s1", "BAR", "Barista"),
            "r-csh": JobRole("r-csh", "s1", None, "Cashier"),
        }

    @pytest.fixture
    def member_roles(self):
        return {
            "m1": {"r-bar"},
            "m2": {"r-bar"},
            "m3": {"r-csh"},
            "m4": {"r-bar", "r-csh"},
        }

    def test_exact_minimum_is_sufficient(self, validator, roles_by_id, member_roles):
        report = validator.validate(
            [RequiredRole("w1", "r-bar", min_count=2)], roles_by_id, member_roles, ["m1", "m2"]
        )
        assert report.is_valid
        assert report.role_coverage[0].is_sufficient
        assert report.role_coverage[0].current_count == 2

    def test_one_short_is_insufficient(self, validator, roles_by_id, member_roles):
        report = validator.validate(
            [RequiredRole("w1", "r-bar", min_count=2)], roles_by_id, member_roles, ["m1"]
        )
        assert not report.is_valid
        assert not report.role_coverage[0].is_sufficient
        assert report.insufficient_summary() == [("BAR", 1, 2)]
        assert report.message == "Insufficient role coverage: BAR: 1/2 people"

    def test_multi_role_member_counts_toward_each(self, validator, roles_by_id, member_roles):
        requirements = [RequiredRole("w1", "r-bar"), RequiredRole("w1", "r-csh")]
        report = validator.validate(requirements, roles_by_id, member_roles, ["m4"])
        assert report.is_valid
        assert [c.current_count for c in report.role_coverage] == [1, 1]

    def test_duplicate_assigned_ids_count_once(self, validator, roles_by_id, member_roles):
        report = validator.validate(
            [RequiredRole("w1", "r-bar", min_count=2)], roles_by_id, member_roles, ["m1", "m1"]
        )
        assert report.role_coverage[0].current_count == 1
        assert not report.is_valid

    def test_no_requirements_is_valid(self, validator, roles_by_id, member_roles):
        report = validator.validate([], roles_by_id, member_roles, ["m1"])
        assert report.is_valid
        assert report.role_coverage == []
        assert report.message == "No role requirements found."

    def test_unknown_member_contributes_nothing(self, validator, roles_by_id, member_roles):
        report = validator.validate(
            [RequiredRole("w1", "r-csh")], roles_by_id, member_roles, ["ghost"]
        )
        assert report.role_coverage[0].current_count == 0

    def test_label_falls_back_to_name(self, validator, roles_by_id, member_roles):
        report = validator.validate([RequiredRole("w1", "r-csh")], roles_by_id, member_roles, [])
        assert report.insufficient_summary() == [("Cashier", 0, 1)]

    def test_requirements_across_items_take_maximum(self, validator, roles_by_id, member_roles):
        requirements = [
            RequiredRole("w1", "r-bar", min_count=1),
            RequiredRole("w2", "r-bar", min_count=3),
        ]
        report = validator.validate(requirements, roles_by_id, member_roles, ["m1", "m2", "m4"])
        assert len(report.role_coverage) == 1
        assert report.role_coverage[0].required_count == 3
        assert report.is_valid

    def test_to_dict(self, validator, roles_by_id, member_roles):
        data = validator.validate(
            [RequiredRole("w1", "r-bar")], roles_by_id, member_roles, ["m1"]
        ).to_dict()
        assert data["is_valid"] is True
        assert data["insufficient_roles"] == []
        assert data["role_coverage"][0]["role_code"] == "BAR"


class TestCoverageMessages:
    """Tests for localized coverage messages."""

    @pytest.fixture
    def short_report(self):
        validator = RoleCoverageValidator()
        return validator.validate(
            [RequiredRole("w1", "r-bar", min_count=2)],
            {"r-bar": JobRole("r-bar", "s1", "BAR", "Barista")},
            {"m1": {"r-bar"}},
            ["m1"],
        )

    def test_korean(self, short_report):
        assert format_coverage_message(short_report, "ko") == "역할 인원 부족: BAR: 1/2명"

    def test_japanese(self, short_report):
        assert format_coverage_message(short_report, "ja") == "役割人員不足: BAR: 1/2人"

    def test_unknown_locale_falls_back_to_english(self, short_report):
        assert format_coverage_message(short_report, "fr").startswith("Insufficient role coverage")

    def test_satisfied_message(self):
        report = RoleCoverageValidator(locale="ko").validate(
            [RequiredRole("w1", "r1")], {}, {"m1": {"r1"}}, ["m1"]
        )
        assert report.message == "모든 역할 요구 사항이 충족되었습니다."

    def test_empty_report_is_valid(self):
        assert CoverageReport().is_valid


def test_aggregate_requirements_keeps_first_order():
    requirements = [
        RequiredRole("w1", "b"),
        RequiredRole("w1", "a", min_count=2),
        RequiredRole("w2", "b", min_count=4),
    ]
    assert list(aggregate_requirements(requirements).items()) == [("b", 4), ("a", 2)]

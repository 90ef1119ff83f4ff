"""Validation module for checking role coverage of assignments."""

from storeshift.validation.role_coverage import (
    CoverageReport,
    RoleCoverage,
    RoleCoverageValidator,
    format_coverage_message,
)

__all__ = [
    "CoverageReport",
    "RoleCoverage",
    "RoleCoverageValidator",
    "format_coverage_message",
]

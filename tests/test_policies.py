"""Tests for shift-time policies and configuration."""

from datetime import date

import pytest

from storeshift.domain.config import SchedulingConfig
from storeshift.domain.models import BusinessHour
from storeshift.domain.policies import BusinessHoursTimePolicy, ShiftTimePolicy


class TestBusinessHoursTimePolicy:
    """Tests for BusinessHoursTimePolicy."""

    @pytest.fixture
    def policy(self):
        """Monday 08:00-20:00, Saturday 10:00-midnight, nothing else."""
        return BusinessHoursTimePolicy.for_store(
            [
                BusinessHour("s1", weekday=1, open_min=480, close_min=1200),
                BusinessHour("s1", weekday=6, open_min=600, close_min=0),
            ]
        )

    def test_is_shift_time_policy(self, policy):
        assert isinstance(policy, ShiftTimePolicy)

    def test_uses_hours_for_weekday(self, policy):
        """2024-06-03 is a Monday (business weekday 1)."""
        assert policy.get_shift_times(date(2024, 6, 3)) == ("08:00", "20:00")

    def test_close_at_midnight_renders_24_00(self, policy):
        """2024-06-08 is a Saturday with close_min 0."""
        assert policy.get_shift_times(date(2024, 6, 8)) == ("10:00", "24:00")

    def test_default_when_no_hours(self, policy):
        """Tuesday has no business hour row."""
        assert policy.get_shift_times(date(2024, 6, 4)) == ("09:00", "18:00")

    def test_sunday_is_weekday_zero(self):
        policy = BusinessHoursTimePolicy.for_store([BusinessHour("s1", 0, 660, 960)])
        assert policy.get_shift_times(date(2024, 6, 9)) == ("11:00", "16:00")
        assert policy.get_shift_times(date(2024, 6, 10)) == ("09:00", "18:00")

    def test_custom_defaults(self):
        policy = BusinessHoursTimePolicy(default_start="10:00", default_end="19:30")
        assert policy.get_shift_times(date(2024, 6, 4)) == ("10:00", "19:30")

    def test_invalid_default_rejected(self):
        with pytest.raises(ValueError):
            BusinessHoursTimePolicy(default_start="9am")


class TestSchedulingConfig:
    """Tests for SchedulingConfig."""

    def test_defaults(self):
        config = SchedulingConfig()
        assert config.default_start_time == "09:00"
        assert config.default_end_time == "18:00"
        assert config.week_starts_on == 0
        assert config.database_url == "sqlite:///storeshift.db"

    def test_from_env(self):
        config = SchedulingConfig.from_env(
            {
                "STORESHIFT_DATABASE_URL": "sqlite://",
                "STORESHIFT_LOG_LEVEL": "debug",
                "STORESHIFT_DEFAULT_START": "08:00",
            }
        )
        assert config.database_url == "sqlite://"
        assert config.log_level == "DEBUG"
        assert config.default_start_time == "08:00"
        assert config.default_end_time == "18:00"

    def test_invalid_week_start(self):
        with pytest.raises(ValueError):
            SchedulingConfig(week_starts_on=7)

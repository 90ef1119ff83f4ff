"""Runtime configuration for the scheduling service."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_DATABASE_URL = "sqlite:///storeshift.db"


@dataclass
class SchedulingConfig:
    """Configuration shared by the service layer and the CLI.

    Attributes:
        default_start_time: Shift start used when a weekday has no business hours.
        default_end_time: Shift end used when a weekday has no business hours.
        week_starts_on: Weekday index weeks start on (0=Monday).
        database_url: SQLAlchemy URL of the schedule database.
        log_level: Name of the root log level.
    """

    default_start_time: str = "09:00"
    default_end_time: str = "18:00"
    week_starts_on: int = 0
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 <= self.week_starts_on <= 6:
            raise ValueError("week_starts_on must be between 0 and 6")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SchedulingConfig":
        """Build a config from ``STORESHIFT_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            default_start_time=env.get("STORESHIFT_DEFAULT_START", "09:00"),
            default_end_time=env.get("STORESHIFT_DEFAULT_END", "18:00"),
            database_url=env.get("STORESHIFT_DATABASE_URL", DEFAULT_DATABASE_URL),
            log_level=env.get("STORESHIFT_LOG_LEVEL", "INFO").upper(),
        )

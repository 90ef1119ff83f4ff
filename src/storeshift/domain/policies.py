"""Policy definitions for scheduling rules.

Policies are kept separate from the scheduling engine so the rules for
deriving shift times can be tested and replaced independently.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from storeshift.domain.models import BusinessHour
from storeshift.domain.timeutils import business_weekday, parse_hhmm


class ShiftTimePolicy(ABC):
    """Abstract base class for choosing the times of an auto-assigned shift."""

    @abstractmethod
    def get_shift_times(self, schedule_date: date) -> tuple[str, str]:
        """Get the (start, end) ``HH:MM`` times for a shift on a date.

        Args:
            schedule_date: Date the shift takes place.

        Returns:
            Tuple of (start_time, end_time).
        """
        pass


@dataclass
class BusinessHoursTimePolicy(ShiftTimePolicy):
    """Use the store's opening hours for the weekday, else fixed defaults.

    A business hour with ``close_min == 0`` closes at midnight and yields an
    end time of ``24:00``. Weekdays with no business hour row use
    ``default_start``-``default_end`` (09:00-18:00).
    """

    business_hours: tuple[BusinessHour, ...] = ()
    default_start: str = "09:00"
    default_end: str = "18:00"

    def __post_init__(self) -> None:
        # Fail early on bad configuration rather than mid-run
        parse_hhmm(self.default_start)
        parse_hhmm(self.default_end)
        self.business_hours = tuple(self.business_hours)

    @classmethod
    def for_store(
        cls,
        business_hours: Iterable[BusinessHour],
        default_start: str = "09:00",
        default_end: str = "18:00",
    ) -> "BusinessHoursTimePolicy":
        return cls(
            business_hours=tuple(business_hours),
            default_start=default_start,
            default_end=default_end,
        )

    def hours_for(self, schedule_date: date) -> Optional[BusinessHour]:
        """Business hour row for the date's weekday, if any."""
        weekday = business_weekday(schedule_date)
        for hour in self.business_hours:
            if hour.weekday == weekday:
                return hour
        return None

    def get_shift_times(self, schedule_date: date) -> tuple[str, str]:
        hour = self.hours_for(schedule_date)
        if hour is None:
            return (self.default_start, self.default_end)
        return (hour.open_time, hour.close_time)

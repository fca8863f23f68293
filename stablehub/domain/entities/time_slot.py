from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time


def day_of_week(on: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (on.weekday() + 1) % 7


@dataclass(frozen=True)
class TimeSlotTemplate:
    id: str
    day_of_week: int  # 0 = Sunday
    start_time: time
    end_time: time
    active: bool = True

    def applies_to(self, on: date) -> bool:
        return self.active and self.day_of_week == day_of_week(on)

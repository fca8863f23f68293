from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from enum import Enum


class DayStatus(str, Enum):
    past = "past"
    full = "full"
    limited = "limited"
    available = "available"

    @property
    def bookable(self) -> bool:
        return self in (DayStatus.limited, DayStatus.available)


@dataclass(frozen=True)
class DayAvailability:
    date: date
    total_slots: int
    booked_slots: int
    remaining: int
    status: DayStatus
    completed_slots: int = 0  # display only


@dataclass(frozen=True)
class SlotView:
    template_id: str
    start_time: time
    end_time: time
    booked: bool

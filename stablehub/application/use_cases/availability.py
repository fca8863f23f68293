"""
Lesson availability over weekly time-slot templates.

All functions here are pure: callers fetch templates and reservations for the
visible window and pass them in. Only reservations in a slot-occupying status
(pending, confirmed) consume capacity or mark a slot as booked; completed
lessons are counted separately for display.
"""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta

from stablehub.domain.entities.availability import DayAvailability, DayStatus, SlotView
from stablehub.domain.entities.reservation import Reservation, ReservationStatus
from stablehub.domain.entities.time_slot import TimeSlotTemplate, day_of_week

DEFAULT_LIMITED_THRESHOLD = 2


def month_window(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def classify_day(on: date, remaining: int, today: date, limited_threshold: int = DEFAULT_LIMITED_THRESHOLD) -> DayStatus:
    if on < today:
        return DayStatus.past
    if remaining <= 0:
        return DayStatus.full
    if remaining <= limited_threshold:
        return DayStatus.limited
    return DayStatus.available


def compute_availability(
    templates: Iterable[TimeSlotTemplate],
    reservations: Iterable[Reservation],
    range_start: date,
    range_end: date,
    today: date,
    limited_threshold: int = DEFAULT_LIMITED_THRESHOLD,
) -> dict[date, DayAvailability]:
    if range_end < range_start:
        return {}

    slots_per_weekday = Counter(t.day_of_week for t in templates if t.active)
    booked: Counter[date] = Counter()
    completed: Counter[date] = Counter()
    for reservation in reservations:
        if not range_start <= reservation.date <= range_end:
            continue
        if reservation.status.occupies_slot:
            booked[reservation.date] += 1
        elif reservation.status is ReservationStatus.completed:
            completed[reservation.date] += 1

    out: dict[date, DayAvailability] = {}
    current = range_start
    while current <= range_end:
        total = slots_per_weekday.get(day_of_week(current), 0)
        remaining = max(0, total - booked[current])
        out[current] = DayAvailability(
            date=current,
            total_slots=total,
            booked_slots=booked[current],
            remaining=remaining,
            status=classify_day(current, remaining, today, limited_threshold),
            completed_slots=completed[current],
        )
        current += timedelta(days=1)
    return out


def get_slots_for_date(
    templates: Iterable[TimeSlotTemplate],
    reservations: Iterable[Reservation],
    on: date,
) -> list[SlotView]:
    taken = {
        (r.start_time, r.end_time)
        for r in reservations
        if r.date == on and r.status.occupies_slot
    }
    candidates = sorted((t for t in templates if t.applies_to(on)), key=lambda t: (t.start_time, t.end_time))
    return [
        SlotView(
            template_id=t.id,
            start_time=t.start_time,
            end_time=t.end_time,
            booked=(t.start_time, t.end_time) in taken,
        )
        for t in candidates
    ]

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum

from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.verification import VerificationOutcome


class ReservationStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"

    @property
    def occupies_slot(self) -> bool:
        return self in OCCUPYING_STATUSES

    def can_transition_to(self, target: ReservationStatus) -> bool:
        return target in RESERVATION_TRANSITIONS[self]


OCCUPYING_STATUSES = frozenset({ReservationStatus.pending, ReservationStatus.confirmed})

RESERVATION_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.pending: frozenset(
        {ReservationStatus.confirmed, ReservationStatus.completed, ReservationStatus.cancelled}
    ),
    ReservationStatus.confirmed: frozenset({ReservationStatus.completed, ReservationStatus.cancelled}),
    ReservationStatus.completed: frozenset(),
    ReservationStatus.cancelled: frozenset(),
}


@dataclass(frozen=True)
class LessonType:
    id: str
    name: str
    price_per_hour: Decimal
    duration_minutes: int
    description: str = ""


@dataclass(frozen=True)
class ReservationDraft:
    user_id: str
    lesson_type_id: str
    date: date
    start_time: time
    end_time: time
    weeks_booked: int
    total_amount: Decimal
    payment_proof_ref: str | None = None
    verification: VerificationOutcome | None = None
    notes: str = ""
    submission_id: str | None = None


@dataclass(frozen=True)
class Reservation:
    id: str
    user_id: str
    lesson_type_id: str
    date: date
    start_time: time
    end_time: time
    weeks_booked: int
    total_amount: Decimal
    status: ReservationStatus = ReservationStatus.pending
    payment_proof_ref: str | None = None
    verification: VerificationOutcome | None = None
    notes: str = ""
    created_at: datetime | None = None
    submission_id: str | None = None

    @property
    def slot_key(self) -> tuple[date, time, time]:
        return (self.date, self.start_time, self.end_time)


@dataclass(frozen=True)
class ReservationDetail:
    """Reservation joined with its lesson type and customer."""

    reservation: Reservation
    lesson_type: LessonType | None
    customer: Customer | None = None

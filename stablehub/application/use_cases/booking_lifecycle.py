from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from stablehub.application.exceptions import (
    InvalidTransition,
    RecordNotFound,
    SlotConflictError,
    SlotUnavailable,
    ValidationError,
)
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.ports.reservation_ledger import ReservationLedgerPort
from stablehub.application.use_cases.availability import (
    DEFAULT_LIMITED_THRESHOLD,
    compute_availability,
    get_slots_for_date,
    month_window,
)
from stablehub.application.utils.money import quantize
from stablehub.domain.entities.availability import DayAvailability, SlotView
from stablehub.domain.entities.reservation import (
    OCCUPYING_STATUSES,
    LessonType,
    Reservation,
    ReservationDraft,
    ReservationStatus,
)


def quote_lesson(lesson_type: LessonType, weeks_booked: int) -> Decimal:
    """Price of `weeks_booked` weekly lessons: hourly rate scaled to the lesson duration."""
    if weeks_booked < 1:
        raise ValidationError("Weeks booked must be at least 1", field="weeks_booked")
    per_lesson = lesson_type.price_per_hour * Decimal(lesson_type.duration_minutes) / Decimal(60)
    return quantize(per_lesson * weeks_booked)


class BookingLifecycleUseCase:
    def __init__(
        self,
        ledger: ReservationLedgerPort,
        catalog: CatalogPort,
        timezone: ZoneInfo,
        limited_threshold: int = DEFAULT_LIMITED_THRESHOLD,
    ) -> None:
        self._ledger = ledger
        self._catalog = catalog
        self._timezone = timezone
        self._limited_threshold = limited_threshold
        self._logger = logging.getLogger(__name__)

    def today(self) -> date:
        return datetime.now(self._timezone).date()

    def availability(self, range_start: date, range_end: date, today: date | None = None) -> dict[date, DayAvailability]:
        return compute_availability(
            self._catalog.list_time_slots(active_only=True),
            self._ledger.list(date_from=range_start, date_to=range_end),
            range_start,
            range_end,
            today or self.today(),
            self._limited_threshold,
        )

    def month_availability(self, year: int, month: int, today: date | None = None) -> dict[date, DayAvailability]:
        return self.availability(*month_window(year, month), today=today)

    def slots_for(self, on: date) -> list[SlotView]:
        return get_slots_for_date(
            self._catalog.list_time_slots(active_only=True),
            self._ledger.list(date_from=on, date_to=on, statuses=OCCUPYING_STATUSES),
            on,
        )

    def create(self, draft: ReservationDraft, today: date | None = None) -> Reservation:
        if draft.weeks_booked < 1:
            raise ValidationError("Weeks booked must be at least 1", field="weeks_booked")
        if draft.total_amount <= 0:
            raise ValidationError("Total amount must be greater than zero", field="total_amount")

        if draft.submission_id:
            existing = self._ledger.find_by_submission(draft.submission_id)
            if existing is not None:
                self._logger.info(
                    "Duplicate booking submission",
                    extra={"booking_id": existing.id, "submission_id": draft.submission_id},
                )
                return existing

        self.check_available(draft, today)

        reservation = Reservation(
            id=str(uuid.uuid4()),
            user_id=draft.user_id,
            lesson_type_id=draft.lesson_type_id,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            weeks_booked=draft.weeks_booked,
            total_amount=draft.total_amount,
            status=ReservationStatus.pending,
            payment_proof_ref=draft.payment_proof_ref,
            verification=draft.verification,
            notes=draft.notes,
            created_at=datetime.now(self._timezone),
            submission_id=draft.submission_id,
        )
        try:
            saved = self._ledger.insert(reservation)
        except SlotConflictError as e:
            raise SlotUnavailable(str(e)) from e

        self._logger.info(
            "Booking created",
            extra={"booking_id": saved.id, "status": saved.status.value, "date": saved.date.isoformat()},
        )
        return saved

    def confirm(self, reservation_id: str) -> Reservation:
        current = self._require(reservation_id)
        if current.status is not ReservationStatus.pending:
            raise InvalidTransition("booking", current.status.value, ReservationStatus.confirmed.value)
        return self._move(current, ReservationStatus.confirmed)

    def complete(self, reservation_id: str) -> Reservation:
        return self._move(self._require(reservation_id), ReservationStatus.completed)

    def cancel(self, reservation_id: str) -> Reservation:
        return self._move(self._require(reservation_id), ReservationStatus.cancelled)

    def annotate(self, reservation_id: str, notes: str) -> Reservation:
        self._require(reservation_id)
        return self._ledger.update_notes(reservation_id, notes)

    def delete(self, reservation_id: str) -> None:
        if not self._ledger.delete(reservation_id):
            raise RecordNotFound(f"Booking {reservation_id} not found.")
        self._logger.info("Booking deleted", extra={"booking_id": reservation_id})

    def get(self, reservation_id: str) -> Reservation:
        return self._require(reservation_id)

    def find_submission(self, submission_id: str | None) -> Reservation | None:
        if not submission_id:
            return None
        return self._ledger.find_by_submission(submission_id)

    def check_available(self, draft: ReservationDraft, today: date | None = None) -> None:
        today = today or self.today()
        if draft.date < today:
            raise SlotUnavailable(f"{draft.date.isoformat()} is in the past.")

        templates = self._catalog.list_time_slots(active_only=True)
        taken = self._ledger.list(
            date_from=draft.date,
            date_to=draft.date,
            statuses=OCCUPYING_STATUSES,
        )
        day = compute_availability(templates, taken, draft.date, draft.date, today)[draft.date]
        if day.remaining <= 0:
            raise SlotUnavailable(f"No lesson slots left on {draft.date.isoformat()}.")

        for slot in get_slots_for_date(templates, taken, draft.date):
            if slot.start_time == draft.start_time and slot.end_time == draft.end_time:
                if slot.booked:
                    raise SlotUnavailable(
                        f"{draft.start_time:%H:%M}-{draft.end_time:%H:%M} on {draft.date.isoformat()} is already booked."
                    )
                return
        raise SlotUnavailable(
            f"No lesson is offered at {draft.start_time:%H:%M}-{draft.end_time:%H:%M} on {draft.date.isoformat()}."
        )

    def _move(self, current: Reservation, target: ReservationStatus) -> Reservation:
        if not current.status.can_transition_to(target):
            raise InvalidTransition("booking", current.status.value, target.value)
        try:
            updated = self._ledger.update_status(current.id, target)
        except SlotConflictError as e:
            raise SlotUnavailable(str(e)) from e
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": current.id, "status": target.value, "previous": current.status.value},
        )
        return updated

    def _require(self, reservation_id: str) -> Reservation:
        reservation = self._ledger.get(reservation_id)
        if reservation is None:
            raise RecordNotFound(f"Booking {reservation_id} not found.")
        return reservation

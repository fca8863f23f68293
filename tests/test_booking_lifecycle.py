"""
Tests for reservation creation and status transitions.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from stablehub.application.exceptions import (
    InvalidTransition,
    RecordNotFound,
    SlotConflictError,
    SlotUnavailable,
    ValidationError,
)
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase, quote_lesson
from stablehub.domain.entities.availability import DayStatus
from stablehub.domain.entities.reservation import (
    OCCUPYING_STATUSES,
    LessonType,
    Reservation,
    ReservationDraft,
    ReservationStatus,
)
from stablehub.domain.entities.time_slot import TimeSlotTemplate
from stablehub.infrastructure.store.memory_store import MemoryCatalog, MemoryReservationLedger, MemoryStore

MONDAY = date(2030, 1, 7)
TODAY = date(2029, 12, 20)
TZ = ZoneInfo("Africa/Johannesburg")


class _InterleavingLedger(MemoryReservationLedger):
    """Runs `between` once, right after a read, as another request would."""

    between = None

    def get(self, reservation_id: str) -> Reservation | None:
        seen = super().get(reservation_id)
        between, self.between = self.between, None
        if between is not None:
            between()
        return seen


def _setup(
    slots: int = 3, ledger_type: type[MemoryReservationLedger] = MemoryReservationLedger
) -> tuple[BookingLifecycleUseCase, MemoryReservationLedger]:
    store = MemoryStore()
    catalog = MemoryCatalog(store)
    catalog.save_lesson_type(
        LessonType(id="beginner", name="Beginner Lesson", price_per_hour=Decimal("350.00"), duration_minutes=60)
    )
    for h in range(9, 9 + slots):
        catalog.save_time_slot(
            TimeSlotTemplate(id=f"mon-{h}", day_of_week=1, start_time=time(h), end_time=time(h + 1))
        )
    ledger = ledger_type(store)
    return BookingLifecycleUseCase(ledger=ledger, catalog=catalog, timezone=TZ), ledger


def _draft(hour: int, on: date = MONDAY, submission_id: str | None = None) -> ReservationDraft:
    return ReservationDraft(
        user_id="rider-1",
        lesson_type_id="beginner",
        date=on,
        start_time=time(hour),
        end_time=time(hour + 1),
        weeks_booked=1,
        total_amount=Decimal("350.00"),
        submission_id=submission_id,
    )


def test_third_booking_fills_day_and_exact_slot_is_rejected():
    """Filling the last open slot makes the day full; booking an occupied slot raises SlotUnavailable."""
    uc, _ = _setup()
    uc.create(_draft(9), TODAY)
    uc.create(_draft(10), TODAY)

    created = uc.create(_draft(11), TODAY)
    day = uc.availability(MONDAY, MONDAY, today=TODAY)[MONDAY]

    assert created.status is ReservationStatus.pending
    assert day.remaining == 0
    assert day.status is DayStatus.full
    with pytest.raises(SlotUnavailable):
        uc.create(_draft(10), TODAY)


def test_exact_slot_already_booked_with_capacity_left():
    """A taken slot is rejected even while other slots remain open."""
    uc, _ = _setup()
    uc.create(_draft(9), TODAY)

    with pytest.raises(SlotUnavailable):
        uc.create(_draft(9), TODAY)


def test_slot_not_offered_is_rejected():
    """Times that match no template cannot be booked."""
    uc, _ = _setup()

    with pytest.raises(SlotUnavailable):
        uc.create(_draft(15), TODAY)


def test_past_date_is_rejected():
    """Bookings for dates before today are refused."""
    uc, _ = _setup()

    with pytest.raises(SlotUnavailable):
        uc.create(_draft(9), today=date(2030, 1, 8))


def test_cancelled_slot_can_be_rebooked():
    """Cancelling releases the exact slot."""
    uc, _ = _setup()
    first = uc.create(_draft(9), TODAY)
    uc.cancel(first.id)

    again = uc.create(_draft(9), TODAY)

    assert again.id != first.id
    assert again.status is ReservationStatus.pending


def test_confirm_after_cancel_is_invalid():
    """A cancelled booking cannot be confirmed."""
    uc, _ = _setup()
    reservation = uc.create(_draft(9), TODAY)
    uc.cancel(reservation.id)

    with pytest.raises(InvalidTransition):
        uc.confirm(reservation.id)


def test_transitions_follow_the_table():
    """pending -> confirmed -> completed; completed is terminal."""
    uc, _ = _setup()
    reservation = uc.create(_draft(9), TODAY)

    assert uc.confirm(reservation.id).status is ReservationStatus.confirmed
    with pytest.raises(InvalidTransition):
        uc.confirm(reservation.id)
    assert uc.complete(reservation.id).status is ReservationStatus.completed
    with pytest.raises(InvalidTransition):
        uc.cancel(reservation.id)


def test_pending_can_complete_directly():
    """Completion is allowed straight from pending."""
    uc, _ = _setup()
    reservation = uc.create(_draft(9), TODAY)

    assert uc.complete(reservation.id).status is ReservationStatus.completed


def test_completed_booking_frees_capacity():
    """Completed lessons no longer hold the slot."""
    uc, _ = _setup(slots=1)
    reservation = uc.create(_draft(9), TODAY)
    uc.complete(reservation.id)

    day = uc.availability(MONDAY, MONDAY, today=TODAY)[MONDAY]

    assert day.remaining == 1
    assert day.completed_slots == 1


def test_annotate_keeps_status_and_delete_removes():
    """Notes can be edited freely; deleting an unknown booking raises RecordNotFound."""
    uc, ledger = _setup()
    reservation = uc.create(_draft(9), TODAY)

    updated = uc.annotate(reservation.id, "Bring own helmet")
    uc.delete(reservation.id)

    assert updated.notes == "Bring own helmet"
    assert updated.status is ReservationStatus.pending
    assert ledger.get(reservation.id) is None
    with pytest.raises(RecordNotFound):
        uc.delete(reservation.id)


def test_duplicate_submission_returns_existing_booking():
    """Resubmitting with the same submission id does not create a second booking."""
    uc, ledger = _setup()

    first = uc.create(_draft(9, submission_id="sub-1"), TODAY)
    second = uc.create(_draft(9, submission_id="sub-1"), TODAY)

    assert first.id == second.id
    assert len(ledger.list()) == 1


def test_ledger_rejects_second_occupying_insert():
    """The ledger refuses two occupying reservations on the same exact slot."""
    _, ledger = _setup()
    base = dict(
        user_id="u",
        lesson_type_id="beginner",
        date=MONDAY,
        start_time=time(9),
        end_time=time(10),
        weeks_booked=1,
        total_amount=Decimal("350.00"),
    )
    ledger.insert(Reservation(id="a", **base))

    with pytest.raises(SlotConflictError):
        ledger.insert(Reservation(id="b", **base))
    ledger.insert(Reservation(id="c", status=ReservationStatus.cancelled, **base))
    assert len(ledger.list()) == 2


def test_invalid_drafts_are_rejected():
    """Zero weeks or a zero amount fail validation before touching the ledger."""
    uc, ledger = _setup()
    draft = _draft(9)

    with pytest.raises(ValidationError):
        uc.create(ReservationDraft(**{**draft.__dict__, "weeks_booked": 0}), TODAY)
    with pytest.raises(ValidationError):
        uc.create(ReservationDraft(**{**draft.__dict__, "total_amount": Decimal("0")}), TODAY)
    assert ledger.list() == []


def test_quote_scales_hourly_rate_by_duration_and_weeks():
    """A 45 minute lesson at R450/hour over 4 weeks costs R1350."""
    private = LessonType(id="private", name="Private", price_per_hour=Decimal("450.00"), duration_minutes=45)

    assert quote_lesson(private, 4) == Decimal("1350.00")
    with pytest.raises(ValidationError):
        quote_lesson(private, 0)


def test_confirm_uses_status_stored_at_write_time():
    """A cancel and rebooking that land between read and write leave one live booking on the slot."""
    uc, ledger = _setup(ledger_type=_InterleavingLedger)
    first = uc.create(_draft(9), TODAY)
    rebooked = []

    def cancel_and_rebook():
        uc.cancel(first.id)
        rebooked.append(uc.create(_draft(9), TODAY))

    ledger.between = cancel_and_rebook
    with pytest.raises(InvalidTransition):
        uc.confirm(first.id)

    live = ledger.list(statuses=OCCUPYING_STATUSES)
    assert [r.id for r in live] == [rebooked[0].id]
    assert ledger.get(first.id).status is ReservationStatus.cancelled


def test_ledger_refuses_to_leave_terminal_status():
    """The ledger checks transitions itself, whatever the caller saw."""
    _, ledger = _setup()
    ledger.insert(
        Reservation(
            id="r1",
            user_id="u",
            lesson_type_id="beginner",
            date=MONDAY,
            start_time=time(9),
            end_time=time(10),
            weeks_booked=1,
            total_amount=Decimal("350.00"),
            status=ReservationStatus.completed,
        )
    )

    with pytest.raises(InvalidTransition):
        ledger.update_status("r1", ReservationStatus.cancelled)
    assert ledger.get("r1").status is ReservationStatus.completed

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date

from stablehub.domain.entities.reservation import Reservation, ReservationStatus


class ReservationLedgerPort(ABC):
    @abstractmethod
    def insert(self, reservation: Reservation) -> Reservation:
        """
        Append a reservation.

        Must behave like a unique index on (date, start_time, end_time) over
        slot-occupying reservations: raises SlotConflictError if one already
        holds the exact slot. The check and the insert are atomic.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, reservation_id: str) -> Reservation | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_submission(self, submission_id: str) -> Reservation | None:
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        user_id: str | None = None,
    ) -> list[Reservation]:
        """List reservations ordered by date descending."""
        raise NotImplementedError

    @abstractmethod
    def update_status(self, reservation_id: str, status: ReservationStatus) -> Reservation:
        """
        Move a reservation to `status` as one atomic compare-and-set.

        The transition is checked against the stored status, not the caller's
        copy: raises InvalidTransition if it is not allowed, and
        SlotConflictError if it would make the reservation occupy a slot that
        another one already holds.
        """
        raise NotImplementedError

    @abstractmethod
    def update_notes(self, reservation_id: str, notes: str) -> Reservation:
        raise NotImplementedError

    @abstractmethod
    def delete(self, reservation_id: str) -> bool:
        raise NotImplementedError

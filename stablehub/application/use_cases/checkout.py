from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, time
from typing import Iterator

from stablehub.application.exceptions import RecordNotFound, SubmissionInProgress, ValidationError
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.ports.proof_storage import ProofStoragePort
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase, quote_lesson
from stablehub.application.use_cases.cart import CartUseCase
from stablehub.application.use_cases.notifications import NotificationUseCase
from stablehub.application.use_cases.order_lifecycle import OrderLifecycleUseCase
from stablehub.application.use_cases.verify_payment import PaymentProofGate
from stablehub.application.utils.validation import validate_proof_document
from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.order import Order
from stablehub.domain.entities.reservation import Reservation, ReservationDraft
from stablehub.domain.entities.verification import ProofDocument, VerificationOutcome, Verdict


@dataclass(frozen=True)
class LessonCheckoutResult:
    reservation: Reservation
    verification: VerificationOutcome | None


@dataclass(frozen=True)
class OrderCheckoutResult:
    order: Order
    verification: VerificationOutcome | None


class CheckoutUseCase:
    """
    Turns a lesson selection or a cart plus a payment proof into a pending record.

    Order of work per submission:
    - validate the proof document (no network yet)
    - check the slot / cart, price the purchase
    - verify the proof (advisory, never blocks)
    - upload the proof, create the record, notify the operator
    """

    def __init__(
        self,
        catalog: CatalogPort,
        bookings: BookingLifecycleUseCase,
        orders: OrderLifecycleUseCase,
        carts: CartUseCase,
        gate: PaymentProofGate,
        proofs: ProofStoragePort,
        notifications: NotificationUseCase,
        max_proof_bytes: int,
        default_pickup_location: str = "",
    ) -> None:
        self._catalog = catalog
        self._bookings = bookings
        self._orders = orders
        self._carts = carts
        self._gate = gate
        self._proofs = proofs
        self._notifications = notifications
        self._max_proof_bytes = max_proof_bytes
        self._default_pickup_location = default_pickup_location
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def checkout_lesson(
        self,
        customer: Customer,
        lesson_type_id: str,
        on: date,
        start_time: time,
        end_time: time,
        weeks_booked: int,
        proof: ProofDocument | None,
        submission_id: str | None = None,
        today: date | None = None,
    ) -> LessonCheckoutResult:
        document = validate_proof_document(proof, self._max_proof_bytes)
        lesson_type = self._catalog.get_lesson_type(lesson_type_id)
        if lesson_type is None:
            raise RecordNotFound(f"Lesson type {lesson_type_id} not found.")
        total = quote_lesson(lesson_type, weeks_booked)

        with self._claim(submission_id):
            draft = ReservationDraft(
                user_id=customer.id,
                lesson_type_id=lesson_type.id,
                date=on,
                start_time=start_time,
                end_time=end_time,
                weeks_booked=weeks_booked,
                total_amount=total,
                submission_id=submission_id,
            )
            existing = self._bookings.find_submission(submission_id)
            if existing is not None:
                return LessonCheckoutResult(reservation=existing, verification=existing.verification)
            self._bookings.check_available(draft, today)

            outcome = self._gate.verify(document, total)
            proof_ref = self._proofs.upload(customer.id, document)
            reservation = self._bookings.create(
                replace(draft, payment_proof_ref=proof_ref, verification=outcome),
                today,
            )

        self._notify(lambda: self._notifications.booking_created(reservation, lesson_type, customer))
        return LessonCheckoutResult(reservation=reservation, verification=outcome)

    def checkout_cart(
        self,
        customer: Customer,
        proof: ProofDocument | None,
        pickup_location: str | None = None,
        submission_id: str | None = None,
    ) -> OrderCheckoutResult:
        document = validate_proof_document(proof, self._max_proof_bytes)

        with self._claim(submission_id):
            existing = self._orders.find_submission(submission_id)
            if existing is not None:
                return OrderCheckoutResult(order=existing, verification=existing.verification)
            cart = self._carts.get(customer.id)
            if cart.is_empty:
                raise ValidationError("Your cart is empty", field="items")

            outcome = self._gate.verify(document, cart.total_price())
            proof_ref = self._proofs.upload(customer.id, document)
            order = self._orders.create(
                user_id=customer.id,
                lines=cart.lines,
                payment_proof_ref=proof_ref,
                verification=outcome,
                pickup_location=pickup_location or self._default_pickup_location,
                submission_id=submission_id,
            )
            if outcome.verdict is Verdict.verified:
                order = self._orders.mark_verified(order.id, outcome)
            self._carts.clear(customer.id)

        self._notify(lambda: self._notifications.order_created(order, customer))
        return OrderCheckoutResult(order=order, verification=outcome)

    @contextmanager
    def _claim(self, submission_id: str | None) -> Iterator[None]:
        if not submission_id:
            yield
            return
        with self._in_flight_lock:
            if submission_id in self._in_flight:
                raise SubmissionInProgress(f"Submission {submission_id} is already being processed.")
            self._in_flight.add(submission_id)
        try:
            yield
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(submission_id)

    def _notify(self, send) -> None:
        try:
            send()
        except Exception as e:
            self._logger.error("Error sending notification", extra={"error": str(e)})

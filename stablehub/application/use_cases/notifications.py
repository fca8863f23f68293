from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from stablehub.application.ports.email_sender import EmailSenderPort
from stablehub.application.ports.proof_storage import ProofStoragePort
from stablehub.application.use_cases.verify_payment import details, summarize
from stablehub.application.utils.money import format_rand
from stablehub.application.utils.validation import require_text, validate_email
from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.order import Order
from stablehub.domain.entities.reservation import LessonType, Reservation

# Every message goes through one provider template; unused keys are sent empty.
TEMPLATE_KEYS = (
    "to_email",
    "email_type",
    "subject_line",
    "customer_name",
    "customer_email",
    "customer_phone",
    "order_items",
    "total_amount",
    "pickup_location",
    "order_date",
    "payment_proof_url",
    "ai_verification_summary",
    "ai_verification_details",
    "order_id",
    "lesson_type",
    "lesson_date",
    "lesson_time",
    "weeks_booked",
    "booking_id",
    "contact_message",
    "subject",
    "date",
)


def build_template(**fields: object) -> dict[str, str]:
    unknown = set(fields) - set(TEMPLATE_KEYS)
    if unknown:
        raise KeyError(f"Unknown template keys: {sorted(unknown)}")
    return {key: "" if fields.get(key) is None else str(fields[key]) for key in TEMPLATE_KEYS}


def short_id(record_id: str | None) -> str:
    return record_id[:8] if record_id else "Pending"


class NotificationUseCase:
    def __init__(
        self,
        sender: EmailSenderPort,
        proofs: ProofStoragePort,
        operator_email: str,
        timezone: ZoneInfo,
    ) -> None:
        self._sender = sender
        self._proofs = proofs
        self._operator_email = operator_email
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def order_created(self, order: Order, customer: Customer) -> bool:
        items = "\n".join(
            f"- {item.name} x {item.quantity} - {format_rand(item.line_total)}" for item in order.items
        ) or "No items"
        proof_url = self._proofs.public_url(order.payment_proof_ref) if order.payment_proof_ref else None
        params = build_template(
            to_email=self._operator_email,
            email_type="New Order Received",
            subject_line=f"Order #{short_id(order.id)}",
            customer_name=customer.full_name,
            customer_email=customer.email,
            customer_phone=customer.contact_number,
            order_items=items,
            total_amount=format_rand(order.total_amount),
            pickup_location=order.pickup_location,
            order_date=self._now(),
            payment_proof_url=proof_url or "No payment proof uploaded",
            ai_verification_summary=summarize(order.verification),
            ai_verification_details=details(order.verification),
            order_id=order.id,
        )
        return self._send(params, order_id=order.id)

    def booking_created(self, reservation: Reservation, lesson_type: LessonType, customer: Customer) -> bool:
        params = build_template(
            to_email=self._operator_email,
            email_type="New Lesson Booking",
            subject_line=f"Booking #{short_id(reservation.id)}",
            customer_name=customer.full_name,
            customer_email=customer.email,
            customer_phone=customer.contact_number,
            lesson_type=lesson_type.name,
            lesson_date=reservation.date.isoformat(),
            lesson_time=f"{reservation.start_time:%H:%M} - {reservation.end_time:%H:%M}",
            weeks_booked=reservation.weeks_booked,
            total_amount=format_rand(reservation.total_amount),
            ai_verification_summary=summarize(reservation.verification),
            booking_id=reservation.id,
        )
        return self._send(params, booking_id=reservation.id)

    def contact_message(
        self,
        name: str,
        email: str,
        subject: str,
        message: str,
        phone: str | None = None,
    ) -> bool:
        name = require_text(name, "name", "Name")
        email = validate_email(email)
        subject = require_text(subject, "subject", "Subject")
        message = require_text(message, "message", "Message")
        params = build_template(
            to_email=self._operator_email,
            email_type="Contact Form Submission",
            subject_line=subject,
            customer_name=name,
            customer_email=email,
            customer_phone=(phone or "").strip() or "Not provided",
            contact_message=message,
            subject=subject,
            date=self._now(),
        )
        return self._send(params)

    def order_status_changed(self, order: Order, customer: Customer) -> bool:
        params = build_template(
            to_email=customer.email,
            email_type="Order Confirmation",
            subject_line=f"Your Order #{short_id(order.id)} - {order.status.value}",
            customer_name=customer.full_name,
            customer_email=customer.email,
            customer_phone=customer.contact_number,
            order_id=order.id,
            order_date=self._now(),
            total_amount=format_rand(order.total_amount),
        )
        return self._send(params, order_id=order.id)

    def _send(self, params: dict[str, str], **context: str) -> bool:
        sent = self._sender.send(params)
        if not sent:
            self._logger.warning(
                "Notification not delivered",
                extra={"email_type": params["email_type"], **context},
            )
        return sent

    def _now(self) -> str:
        return datetime.now(self._timezone).strftime("%Y-%m-%d %H:%M")

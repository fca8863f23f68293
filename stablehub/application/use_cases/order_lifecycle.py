from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from stablehub.application.exceptions import InvalidTransition, RecordNotFound, ValidationError
from stablehub.application.ports.order_ledger import OrderLedgerPort
from stablehub.domain.entities.cart import CartLine
from stablehub.domain.entities.order import Order, OrderItem, OrderStatus
from stablehub.domain.entities.verification import VerificationOutcome, Verdict


def snapshot_items(lines: Sequence[CartLine]) -> tuple[OrderItem, ...]:
    """Freeze the live cart prices into order items."""
    items: list[OrderItem] = []
    for line in lines:
        if line.quantity < 1:
            raise ValidationError("Quantity must be at least 1", field="quantity")
        if line.product.price < 0:
            raise ValidationError("Price cannot be negative", field="price")
        items.append(
            OrderItem(
                product_id=line.product.id,
                name=line.product.name,
                quantity=line.quantity,
                price_at_purchase=line.product.price,
                category=line.product.category,
                cost_price=line.product.cost_price,
            )
        )
    return tuple(items)


class OrderLifecycleUseCase:
    def __init__(self, ledger: OrderLedgerPort, timezone: ZoneInfo) -> None:
        self._ledger = ledger
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def create(
        self,
        user_id: str,
        lines: Sequence[CartLine],
        payment_proof_ref: str | None = None,
        verification: VerificationOutcome | None = None,
        pickup_location: str = "",
        notes: str = "",
        submission_id: str | None = None,
    ) -> Order:
        if submission_id:
            existing = self._ledger.find_by_submission(submission_id)
            if existing is not None:
                self._logger.info(
                    "Duplicate order submission",
                    extra={"order_id": existing.id, "submission_id": submission_id},
                )
                return existing

        if not lines:
            raise ValidationError("Your cart is empty", field="items")
        items = snapshot_items(lines)
        total = sum((item.line_total for item in items), Decimal("0"))

        order = Order(
            id=str(uuid.uuid4()),
            user_id=user_id,
            items=items,
            total_amount=total,
            status=OrderStatus.pending,
            payment_proof_ref=payment_proof_ref,
            verification=verification,
            notes=notes,
            pickup_location=pickup_location,
            created_at=datetime.now(self._timezone),
            submission_id=submission_id,
        )
        saved = self._ledger.insert(order)
        self._logger.info(
            "Order created",
            extra={"order_id": saved.id, "status": saved.status.value, "total": str(saved.total_amount)},
        )
        return saved

    def mark_verified(self, order_id: str, outcome: VerificationOutcome | None) -> Order:
        current = self._require(order_id)
        if outcome is None or not outcome.success or outcome.verdict is not Verdict.verified:
            raise InvalidTransition("order", current.status.value, OrderStatus.verified.value)
        return self._move(current, OrderStatus.verified)

    def complete(self, order_id: str) -> Order:
        return self._move(self._require(order_id), OrderStatus.completed)

    def cancel(self, order_id: str) -> Order:
        return self._move(self._require(order_id), OrderStatus.cancelled)

    def annotate(self, order_id: str, notes: str) -> Order:
        self._require(order_id)
        return self._ledger.update_notes(order_id, notes)

    def delete(self, order_id: str) -> None:
        if not self._ledger.delete(order_id):
            raise RecordNotFound(f"Order {order_id} not found.")
        self._logger.info("Order deleted", extra={"order_id": order_id})

    def get(self, order_id: str) -> Order:
        return self._require(order_id)

    def find_submission(self, submission_id: str | None) -> Order | None:
        if not submission_id:
            return None
        return self._ledger.find_by_submission(submission_id)

    def _move(self, current: Order, target: OrderStatus) -> Order:
        if not current.status.can_transition_to(target):
            raise InvalidTransition("order", current.status.value, target.value)
        updated = self._ledger.update_status(current.id, target)
        self._logger.info(
            "Order status changed",
            extra={"order_id": current.id, "status": target.value, "previous": current.status.value},
        )
        return updated

    def _require(self, order_id: str) -> Order:
        order = self._ledger.get(order_id)
        if order is None:
            raise RecordNotFound(f"Order {order_id} not found.")
        return order

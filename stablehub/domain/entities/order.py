from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.verification import VerificationOutcome


class OrderStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    completed = "completed"
    cancelled = "cancelled"

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ORDER_TRANSITIONS[self]


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.verified, OrderStatus.completed, OrderStatus.cancelled}),
    OrderStatus.verified: frozenset({OrderStatus.completed, OrderStatus.cancelled}),
    OrderStatus.completed: frozenset(),
    OrderStatus.cancelled: frozenset(),
}


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    name: str
    quantity: int
    price_at_purchase: Decimal
    category: str = ""
    cost_price: Decimal = Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.price_at_purchase * self.quantity


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.pending
    payment_proof_ref: str | None = None
    verification: VerificationOutcome | None = None
    notes: str = ""
    pickup_location: str = ""
    created_at: datetime | None = None
    submission_id: str | None = None


@dataclass(frozen=True)
class OrderDetail:
    """Order joined with its customer."""

    order: Order
    customer: Customer | None = None

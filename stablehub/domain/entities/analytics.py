from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from stablehub.domain.entities.customer import Customer


@dataclass(frozen=True)
class MonthlyTrend:
    month: str  # e.g. "Oct 2026"
    orders: int
    bookings: int
    revenue: Decimal


@dataclass(frozen=True)
class Analytics:
    total_revenue: Decimal
    monthly_revenue: Decimal
    total_orders: int
    total_bookings: int
    booking_revenue: Decimal
    top_products: list[tuple[str, int]] = field(default_factory=list)
    top_categories: list[tuple[str, Decimal]] = field(default_factory=list)
    monthly_trends: list[MonthlyTrend] = field(default_factory=list)
    orders_by_status: dict[str, int] = field(default_factory=dict)
    bookings_by_status: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Activity:
    kind: str  # "order" | "booking"
    at: datetime


@dataclass(frozen=True)
class CustomerStats:
    customer: Customer
    total_orders: int
    total_bookings: int
    total_spent: Decimal
    last_activity: Activity | None
    tier: str  # "VIP" | "Regular" | "New"


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int
    total_revenue: Decimal
    total_profit: Decimal
    completed_orders: int

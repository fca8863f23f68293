from __future__ import annotations

import logging
import uuid
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, time
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from stablehub.application.exceptions import RecordNotFound, ValidationError
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.ports.customers import CustomerDirectoryPort
from stablehub.application.ports.order_ledger import OrderLedgerPort
from stablehub.application.ports.reservation_ledger import ReservationLedgerPort
from stablehub.application.utils.money import to_decimal
from stablehub.application.utils.validation import require_text
from stablehub.domain.entities.analytics import Activity, Analytics, CustomerStats, MonthlyTrend, OrderSummary
from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.order import Order, OrderDetail, OrderStatus
from stablehub.domain.entities.product import Product
from stablehub.domain.entities.reservation import Reservation, ReservationDetail, ReservationStatus
from stablehub.domain.entities.time_slot import TimeSlotTemplate

TREND_MONTHS = 6
TOP_PRODUCTS = 5
VIP_MIN_ORDERS = 5
VIP_MIN_SPENT = Decimal("5000")
REGULAR_MIN = 2

PRODUCT_FIELDS = frozenset(
    {"name", "description", "price", "cost_price", "category", "stock_quantity", "image_url"}
)


def customer_tier(total_orders: int, total_bookings: int, total_spent: Decimal) -> str:
    if total_orders > VIP_MIN_ORDERS or total_spent > VIP_MIN_SPENT:
        return "VIP"
    if total_orders > REGULAR_MIN or total_bookings > REGULAR_MIN:
        return "Regular"
    return "New"


def summarize_orders(orders: Sequence[Order]) -> OrderSummary:
    """Totals over a list of orders; profit uses the cost price captured on each item."""
    revenue = sum((o.total_amount for o in orders), Decimal("0"))
    profit = sum(
        ((item.price_at_purchase - item.cost_price) * item.quantity for o in orders for item in o.items),
        Decimal("0"),
    )
    return OrderSummary(
        total_orders=len(orders),
        total_revenue=revenue,
        total_profit=profit,
        completed_orders=sum(1 for o in orders if o.status is OrderStatus.completed),
    )


def _month_key(moment: datetime | None) -> tuple[int, int] | None:
    return (moment.year, moment.month) if moment else None


def _previous_months(now: datetime, count: int) -> list[tuple[int, int]]:
    months: list[tuple[int, int]] = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def compute_analytics(orders: Sequence[Order], bookings: Sequence[Reservation], now: datetime) -> Analytics:
    current = (now.year, now.month)
    product_sales: Counter[str] = Counter()
    category_sales: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for order in orders:
        for item in order.items:
            product_sales[item.name] += item.quantity
            category_sales[item.category or "uncategorized"] += item.line_total

    trends: list[MonthlyTrend] = []
    for year, month in _previous_months(now, TREND_MONTHS):
        month_orders = [o for o in orders if _month_key(o.created_at) == (year, month)]
        month_bookings = [b for b in bookings if _month_key(b.created_at) == (year, month)]
        trends.append(
            MonthlyTrend(
                month=datetime(year, month, 1).strftime("%b %Y"),
                orders=len(month_orders),
                bookings=len(month_bookings),
                revenue=sum((o.total_amount for o in month_orders), Decimal("0"))
                + sum((b.total_amount for b in month_bookings), Decimal("0")),
            )
        )

    return Analytics(
        total_revenue=sum((o.total_amount for o in orders), Decimal("0")),
        monthly_revenue=sum(
            (o.total_amount for o in orders if _month_key(o.created_at) == current), Decimal("0")
        ),
        total_orders=len(orders),
        total_bookings=len(bookings),
        booking_revenue=sum((b.total_amount for b in bookings), Decimal("0")),
        top_products=product_sales.most_common(TOP_PRODUCTS),
        top_categories=sorted(category_sales.items(), key=lambda kv: kv[1], reverse=True),
        monthly_trends=trends,
        orders_by_status={s.value: sum(1 for o in orders if o.status is s) for s in OrderStatus},
        bookings_by_status={s.value: sum(1 for b in bookings if b.status is s) for s in ReservationStatus},
    )


class AdminService:
    """Back-office operations: listings with joined records, catalog upkeep, customers and analytics."""

    def __init__(
        self,
        orders: OrderLedgerPort,
        reservations: ReservationLedgerPort,
        catalog: CatalogPort,
        customers: CustomerDirectoryPort,
        admin_emails: Iterable[str],
        timezone: ZoneInfo,
    ) -> None:
        self._orders = orders
        self._reservations = reservations
        self._catalog = catalog
        self._customers = customers
        self._admin_emails = {e.strip().lower() for e in admin_emails if e and e.strip()}
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def is_admin(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self._admin_emails

    def list_orders(self, status: OrderStatus | None = None) -> list[OrderDetail]:
        return [OrderDetail(order=o, customer=self._customers.get(o.user_id)) for o in self._orders.list(status=status)]

    def list_bookings(self, status: ReservationStatus | None = None) -> list[ReservationDetail]:
        statuses = [status] if status else None
        return [self._booking_detail(r) for r in self._reservations.list(statuses=statuses)]

    def user_orders(self, user_id: str) -> list[Order]:
        return self._orders.list(user_id=user_id)

    def user_bookings(self, user_id: str) -> list[ReservationDetail]:
        return [self._booking_detail(r) for r in self._reservations.list(user_id=user_id)]

    def get_analytics(self, now: datetime | None = None) -> Analytics:
        return compute_analytics(
            self._orders.list(),
            self._reservations.list(),
            now or datetime.now(self._timezone),
        )

    def order_summary(self, status: OrderStatus | None = None) -> OrderSummary:
        return summarize_orders(self._orders.list(status=status))

    def list_customers(self, search: str | None = None) -> list[CustomerStats]:
        orders_by_user: dict[str, list[Order]] = defaultdict(list)
        for order in self._orders.list():
            orders_by_user[order.user_id].append(order)
        bookings_by_user: dict[str, list[Reservation]] = defaultdict(list)
        for booking in self._reservations.list():
            bookings_by_user[booking.user_id].append(booking)

        term = (search or "").strip().lower()
        out: list[CustomerStats] = []
        for customer in self._customers.list():
            if term and not any(term in (v or "").lower() for v in (customer.name, customer.surname, customer.email)):
                continue
            orders = orders_by_user.get(customer.id, [])
            bookings = bookings_by_user.get(customer.id, [])
            spent = sum((o.total_amount for o in orders), Decimal("0")) + sum(
                (b.total_amount for b in bookings), Decimal("0")
            )
            activities = [Activity("order", o.created_at) for o in orders if o.created_at] + [
                Activity("booking", b.created_at) for b in bookings if b.created_at
            ]
            out.append(
                CustomerStats(
                    customer=customer,
                    total_orders=len(orders),
                    total_bookings=len(bookings),
                    total_spent=spent,
                    last_activity=max(activities, key=lambda a: a.at) if activities else None,
                    tier=customer_tier(len(orders), len(bookings), spent),
                )
            )
        return out

    def create_product(self, data: dict[str, Any]) -> Product:
        name = require_text(data.get("name"), "name", "Product name")
        price = to_decimal(data.get("price"))
        if price is None or price < 0:
            raise ValidationError("Price must be a non-negative amount", field="price")
        cost_price = to_decimal(data.get("cost_price")) or Decimal("0")
        product = Product(
            id=str(data.get("id") or uuid.uuid4()),
            name=name,
            price=price,
            cost_price=cost_price,
            category=str(data.get("category") or "feed"),
            stock_quantity=int(data.get("stock_quantity") or 0),
            description=str(data.get("description") or ""),
            image_url=data.get("image_url"),
            created_at=datetime.now(self._timezone),
        )
        saved = self._catalog.save_product(product)
        self._logger.info("Product created", extra={"product_id": saved.id})
        return saved

    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product:
        unknown = set(changes) - PRODUCT_FIELDS
        if unknown:
            raise ValidationError(f"Unknown product fields: {sorted(unknown)}", field=sorted(unknown)[0])
        cleaned = dict(changes)
        for key in ("price", "cost_price"):
            if key in cleaned:
                amount = to_decimal(cleaned[key])
                if amount is None or amount < 0:
                    raise ValidationError(f"{key} must be a non-negative amount", field=key)
                cleaned[key] = amount
        if self._catalog.get_product(product_id) is None:
            raise RecordNotFound(f"Product {product_id} not found.")
        return self._catalog.update_product(product_id, cleaned)

    def delete_product(self, product_id: str) -> None:
        if not self._catalog.delete_product(product_id):
            raise RecordNotFound(f"Product {product_id} not found.")
        self._logger.info("Product deleted", extra={"product_id": product_id})

    def create_time_slot(self, day_of_week: int, start_time: time, end_time: time, active: bool = True) -> TimeSlotTemplate:
        if not 0 <= day_of_week <= 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)", field="day_of_week")
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time", field="start_time")
        return self._catalog.save_time_slot(
            TimeSlotTemplate(
                id=str(uuid.uuid4()),
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                active=active,
            )
        )

    def set_time_slot_active(self, template_id: str, active: bool) -> TimeSlotTemplate:
        for template in self._catalog.list_time_slots(active_only=False):
            if template.id == template_id:
                return self._catalog.save_time_slot(
                    TimeSlotTemplate(
                        id=template.id,
                        day_of_week=template.day_of_week,
                        start_time=template.start_time,
                        end_time=template.end_time,
                        active=active,
                    )
                )
        raise RecordNotFound(f"Time slot {template_id} not found.")

    def _booking_detail(self, reservation: Reservation) -> ReservationDetail:
        return ReservationDetail(
            reservation=reservation,
            lesson_type=self._catalog.get_lesson_type(reservation.lesson_type_id),
            customer=self._customers.get(reservation.user_id),
        )

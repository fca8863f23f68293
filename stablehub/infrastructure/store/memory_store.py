from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Any

from stablehub.application.exceptions import InvalidTransition, RecordNotFound, SlotConflictError
from stablehub.application.ports.cart_store import CartStorePort
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.ports.customers import CustomerDirectoryPort
from stablehub.application.ports.order_ledger import OrderLedgerPort
from stablehub.application.ports.reservation_ledger import ReservationLedgerPort
from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.order import Order, OrderStatus
from stablehub.domain.entities.product import Product
from stablehub.domain.entities.reservation import LessonType, Reservation, ReservationStatus
from stablehub.domain.entities.time_slot import TimeSlotTemplate

COLLECTIONS = ("reservations", "orders", "products", "lesson_types", "time_slots", "customers", "carts")


class MemoryStore:
    """
    In-process stand-in for the hosted data backend.

    Holds every collection behind one lock; the port adapters below share a
    store so admin listings can join across collections.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.reservations: dict[str, Reservation] = {}
        self.orders: dict[str, Order] = {}
        self.products: dict[str, Product] = {}
        self.lesson_types: dict[str, LessonType] = {}
        self.time_slots: dict[str, TimeSlotTemplate] = {}
        self.customers: dict[str, Customer] = {}
        self.carts: dict[str, dict[str, int]] = {}

    def commit(self) -> None:
        """Called after every mutation while the lock is held."""

    @contextmanager
    def mutation(self) -> Iterator[None]:
        """
        Hold the lock for a change and commit it.

        If the change or the commit raises, every collection is restored to
        its state before the change, so memory never runs ahead of what was
        saved.
        """
        with self.lock:
            snapshot = {name: dict(getattr(self, name)) for name in COLLECTIONS}
            try:
                yield
                self.commit()
            except Exception:
                for name, rows in snapshot.items():
                    setattr(self, name, rows)
                raise


class MemoryReservationLedger(ReservationLedgerPort):
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def insert(self, reservation: Reservation) -> Reservation:
        with self._store.mutation():
            if reservation.status.occupies_slot:
                self._check_slot_free(reservation)
            self._store.reservations[reservation.id] = reservation
        return reservation

    def get(self, reservation_id: str) -> Reservation | None:
        with self._store.lock:
            return self._store.reservations.get(reservation_id)

    def find_by_submission(self, submission_id: str) -> Reservation | None:
        with self._store.lock:
            for reservation in self._store.reservations.values():
                if reservation.submission_id == submission_id:
                    return reservation
        return None

    def list(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        user_id: str | None = None,
    ) -> list[Reservation]:
        wanted = set(statuses) if statuses is not None else None
        with self._store.lock:
            rows = [
                r
                for r in self._store.reservations.values()
                if (date_from is None or r.date >= date_from)
                and (date_to is None or r.date <= date_to)
                and (wanted is None or r.status in wanted)
                and (user_id is None or r.user_id == user_id)
            ]
        return sorted(rows, key=lambda r: (r.date, r.start_time), reverse=True)

    def update_status(self, reservation_id: str, status: ReservationStatus) -> Reservation:
        with self._store.mutation():
            current = self._require(reservation_id)
            if not current.status.can_transition_to(status):
                raise InvalidTransition("booking", current.status.value, status.value)
            if status.occupies_slot and not current.status.occupies_slot:
                self._check_slot_free(current)
            updated = replace(current, status=status)
            self._store.reservations[reservation_id] = updated
        return updated

    def update_notes(self, reservation_id: str, notes: str) -> Reservation:
        with self._store.mutation():
            updated = replace(self._require(reservation_id), notes=notes)
            self._store.reservations[reservation_id] = updated
        return updated

    def delete(self, reservation_id: str) -> bool:
        with self._store.mutation():
            return self._store.reservations.pop(reservation_id, None) is not None

    def _require(self, reservation_id: str) -> Reservation:
        current = self._store.reservations.get(reservation_id)
        if current is None:
            raise RecordNotFound(f"Booking {reservation_id} not found.")
        return current

    def _check_slot_free(self, reservation: Reservation) -> None:
        for existing in self._store.reservations.values():
            if (
                existing.id != reservation.id
                and existing.status.occupies_slot
                and existing.slot_key == reservation.slot_key
            ):
                raise SlotConflictError(
                    f"{reservation.start_time:%H:%M}-{reservation.end_time:%H:%M} on "
                    f"{reservation.date.isoformat()} is already booked."
                )


class MemoryOrderLedger(OrderLedgerPort):
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def insert(self, order: Order) -> Order:
        with self._store.mutation():
            self._store.orders[order.id] = order
        return order

    def get(self, order_id: str) -> Order | None:
        with self._store.lock:
            return self._store.orders.get(order_id)

    def find_by_submission(self, submission_id: str) -> Order | None:
        with self._store.lock:
            for order in self._store.orders.values():
                if order.submission_id == submission_id:
                    return order
        return None

    def list(self, status: OrderStatus | None = None, user_id: str | None = None) -> list[Order]:
        with self._store.lock:
            rows = [
                o
                for o in self._store.orders.values()
                if (status is None or o.status is status) and (user_id is None or o.user_id == user_id)
            ]
        # insertion order is creation order
        return list(reversed(rows))

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        with self._store.mutation():
            current = self._require(order_id)
            if not current.status.can_transition_to(status):
                raise InvalidTransition("order", current.status.value, status.value)
            updated = replace(current, status=status)
            self._store.orders[order_id] = updated
        return updated

    def update_notes(self, order_id: str, notes: str) -> Order:
        with self._store.mutation():
            updated = replace(self._require(order_id), notes=notes)
            self._store.orders[order_id] = updated
        return updated

    def delete(self, order_id: str) -> bool:
        # items live on the order record, so they go with it
        with self._store.mutation():
            return self._store.orders.pop(order_id, None) is not None

    def _require(self, order_id: str) -> Order:
        current = self._store.orders.get(order_id)
        if current is None:
            raise RecordNotFound(f"Order {order_id} not found.")
        return current


class MemoryCatalog(CatalogPort):
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def list_products(self, category: str | None = None) -> list[Product]:
        with self._store.lock:
            rows = [p for p in self._store.products.values() if category is None or p.category == category]
        return sorted(rows, key=lambda p: p.name.lower())

    def get_product(self, product_id: str) -> Product | None:
        with self._store.lock:
            return self._store.products.get(product_id)

    def save_product(self, product: Product) -> Product:
        with self._store.mutation():
            self._store.products[product.id] = product
        return product

    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product:
        with self._store.mutation():
            current = self._store.products.get(product_id)
            if current is None:
                raise RecordNotFound(f"Product {product_id} not found.")
            updated = replace(current, **changes)
            self._store.products[product_id] = updated
        return updated

    def delete_product(self, product_id: str) -> bool:
        with self._store.mutation():
            return self._store.products.pop(product_id, None) is not None

    def list_lesson_types(self) -> list[LessonType]:
        with self._store.lock:
            return sorted(self._store.lesson_types.values(), key=lambda t: t.name.lower())

    def get_lesson_type(self, lesson_type_id: str) -> LessonType | None:
        with self._store.lock:
            return self._store.lesson_types.get(lesson_type_id)

    def save_lesson_type(self, lesson_type: LessonType) -> LessonType:
        with self._store.mutation():
            self._store.lesson_types[lesson_type.id] = lesson_type
        return lesson_type

    def list_time_slots(self, active_only: bool = True) -> list[TimeSlotTemplate]:
        with self._store.lock:
            rows = [t for t in self._store.time_slots.values() if t.active or not active_only]
        return sorted(rows, key=lambda t: (t.day_of_week, t.start_time))

    def save_time_slot(self, template: TimeSlotTemplate) -> TimeSlotTemplate:
        with self._store.mutation():
            self._store.time_slots[template.id] = template
        return template


class MemoryCustomerDirectory(CustomerDirectoryPort):
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def get(self, customer_id: str) -> Customer | None:
        with self._store.lock:
            return self._store.customers.get(customer_id)

    def save(self, customer: Customer) -> Customer:
        with self._store.mutation():
            self._store.customers[customer.id] = customer
        return customer

    def list(self) -> list[Customer]:
        with self._store.lock:
            return list(reversed(list(self._store.customers.values())))


class MemoryCartStore(CartStorePort):
    def __init__(self, store: MemoryStore) -> None:
        self._store = store

    def load(self, owner_id: str) -> dict[str, int]:
        with self._store.lock:
            return dict(self._store.carts.get(owner_id, {}))

    def save(self, owner_id: str, quantities: dict[str, int]) -> None:
        with self._store.mutation():
            if quantities:
                self._store.carts[owner_id] = dict(quantities)
            else:
                self._store.carts.pop(owner_id, None)

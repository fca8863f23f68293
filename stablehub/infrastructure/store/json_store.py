from __future__ import annotations

import json
import logging
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any

from stablehub.domain.entities.customer import Customer
from stablehub.domain.entities.order import Order, OrderItem, OrderStatus
from stablehub.domain.entities.product import Product
from stablehub.domain.entities.reservation import LessonType, Reservation, ReservationStatus
from stablehub.domain.entities.time_slot import TimeSlotTemplate
from stablehub.domain.entities.verification import VerificationOutcome, VerificationResult, Verdict
from stablehub.infrastructure.store.memory_store import MemoryStore

SCHEMA_VERSION = 1


class JsonStore(MemoryStore):
    """MemoryStore that writes every collection to one JSON file after each mutation."""

    def __init__(self, data_dir: str = "./data", filename: str = "stablehub.json") -> None:
        super().__init__()
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._path = self._data_dir / filename
        self._logger = logging.getLogger(__name__)
        self._load()

    def commit(self) -> None:
        self._save(self._dump())

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # corrupted file: start empty rather than refusing to boot
            self._logger.error("Could not read data file", extra={"path": str(self._path), "error": str(e)})
            return

        with self.lock:
            self.reservations = {r["id"]: _reservation_from(r) for r in data.get("reservations", [])}
            self.orders = {o["id"]: _order_from(o) for o in data.get("orders", [])}
            self.products = {p["id"]: _product_from(p) for p in data.get("products", [])}
            self.lesson_types = {t["id"]: _lesson_type_from(t) for t in data.get("lesson_types", [])}
            self.time_slots = {t["id"]: _time_slot_from(t) for t in data.get("time_slots", [])}
            self.customers = {c["id"]: _customer_from(c) for c in data.get("customers", [])}
            self.carts = {k: {p: int(q) for p, q in v.items()} for k, v in data.get("carts", {}).items()}

    def _dump(self) -> dict[str, Any]:
        return {
            "version": SCHEMA_VERSION,
            "reservations": [_reservation_to(r) for r in self.reservations.values()],
            "orders": [_order_to(o) for o in self.orders.values()],
            "products": [_product_to(p) for p in self.products.values()],
            "lesson_types": [_lesson_type_to(t) for t in self.lesson_types.values()],
            "time_slots": [_time_slot_to(t) for t in self.time_slots.values()],
            "customers": [_customer_to(c) for c in self.customers.values()],
            "carts": self.carts,
        }

    def _save(self, data: dict[str, Any]) -> None:
        """Write to a temp file, then rename over the data file."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise


def _iso(value: date | datetime | time | None) -> str | None:
    return value.isoformat() if value is not None else None


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _dec(value: Any) -> Decimal | None:
    return Decimal(str(value)) if value is not None else None


def _verification_to(outcome: VerificationOutcome | None) -> dict[str, Any] | None:
    if outcome is None:
        return None
    v = outcome.verification
    return {
        "success": outcome.success,
        "verdict": outcome.verdict.value,
        "error": outcome.error,
        "verification": None
        if v is None
        else {
            "is_payment_proof": v.is_payment_proof,
            "detected_amount": str(v.detected_amount) if v.detected_amount is not None else None,
            "amount_matches": v.amount_matches,
            "confidence": v.confidence,
            "is_valid": v.is_valid,
            "issues": list(v.issues),
            "bank_name": v.bank_name,
            "transaction_date": v.transaction_date,
            "reference_number": v.reference_number,
            "reference_matches": v.reference_matches,
            "document_type": v.document_type,
        },
    }


def _verification_from(data: dict[str, Any] | None) -> VerificationOutcome | None:
    if not data:
        return None
    raw = data.get("verification")
    result = None
    if raw:
        result = VerificationResult(
            is_payment_proof=bool(raw.get("is_payment_proof")),
            detected_amount=_dec(raw.get("detected_amount")),
            amount_matches=bool(raw.get("amount_matches")),
            confidence=int(raw.get("confidence", 0)),
            is_valid=bool(raw.get("is_valid")),
            issues=tuple(raw.get("issues") or ()),
            bank_name=raw.get("bank_name"),
            transaction_date=raw.get("transaction_date"),
            reference_number=raw.get("reference_number"),
            reference_matches=bool(raw.get("reference_matches")),
            document_type=raw.get("document_type") or "Unknown",
        )
    return VerificationOutcome(
        success=bool(data.get("success")),
        verdict=Verdict(data.get("verdict", Verdict.manual_review.value)),
        verification=result,
        error=data.get("error"),
    )


def _reservation_to(r: Reservation) -> dict[str, Any]:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "lesson_type_id": r.lesson_type_id,
        "date": _iso(r.date),
        "start_time": _iso(r.start_time),
        "end_time": _iso(r.end_time),
        "weeks_booked": r.weeks_booked,
        "total_amount": str(r.total_amount),
        "status": r.status.value,
        "payment_proof_ref": r.payment_proof_ref,
        "verification": _verification_to(r.verification),
        "notes": r.notes,
        "created_at": _iso(r.created_at),
        "submission_id": r.submission_id,
    }


def _reservation_from(d: dict[str, Any]) -> Reservation:
    return Reservation(
        id=d["id"],
        user_id=d["user_id"],
        lesson_type_id=d["lesson_type_id"],
        date=date.fromisoformat(d["date"]),
        start_time=time.fromisoformat(d["start_time"]),
        end_time=time.fromisoformat(d["end_time"]),
        weeks_booked=int(d.get("weeks_booked", 1)),
        total_amount=Decimal(d["total_amount"]),
        status=ReservationStatus(d.get("status", "pending")),
        payment_proof_ref=d.get("payment_proof_ref"),
        verification=_verification_from(d.get("verification")),
        notes=d.get("notes") or "",
        created_at=_dt(d.get("created_at")),
        submission_id=d.get("submission_id"),
    )


def _order_to(o: Order) -> dict[str, Any]:
    return {
        "id": o.id,
        "user_id": o.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "name": i.name,
                "quantity": i.quantity,
                "price_at_purchase": str(i.price_at_purchase),
                "category": i.category,
                "cost_price": str(i.cost_price),
            }
            for i in o.items
        ],
        "total_amount": str(o.total_amount),
        "status": o.status.value,
        "payment_proof_ref": o.payment_proof_ref,
        "verification": _verification_to(o.verification),
        "notes": o.notes,
        "pickup_location": o.pickup_location,
        "created_at": _iso(o.created_at),
        "submission_id": o.submission_id,
    }


def _order_from(d: dict[str, Any]) -> Order:
    return Order(
        id=d["id"],
        user_id=d["user_id"],
        items=tuple(
            OrderItem(
                product_id=i["product_id"],
                name=i.get("name", ""),
                quantity=int(i["quantity"]),
                price_at_purchase=Decimal(i["price_at_purchase"]),
                category=i.get("category", ""),
                cost_price=Decimal(i.get("cost_price", "0")),
            )
            for i in d.get("items", [])
        ),
        total_amount=Decimal(d["total_amount"]),
        status=OrderStatus(d.get("status", "pending")),
        payment_proof_ref=d.get("payment_proof_ref"),
        verification=_verification_from(d.get("verification")),
        notes=d.get("notes") or "",
        pickup_location=d.get("pickup_location") or "",
        created_at=_dt(d.get("created_at")),
        submission_id=d.get("submission_id"),
    )


def _product_to(p: Product) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "price": str(p.price),
        "category": p.category,
        "cost_price": str(p.cost_price),
        "stock_quantity": p.stock_quantity,
        "description": p.description,
        "image_url": p.image_url,
        "created_at": _iso(p.created_at),
    }


def _product_from(d: dict[str, Any]) -> Product:
    return Product(
        id=d["id"],
        name=d["name"],
        price=Decimal(d["price"]),
        category=d.get("category", "feed"),
        cost_price=Decimal(d.get("cost_price", "0")),
        stock_quantity=int(d.get("stock_quantity", 0)),
        description=d.get("description") or "",
        image_url=d.get("image_url"),
        created_at=_dt(d.get("created_at")),
    )


def _lesson_type_to(t: LessonType) -> dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "price_per_hour": str(t.price_per_hour),
        "duration_minutes": t.duration_minutes,
        "description": t.description,
    }


def _lesson_type_from(d: dict[str, Any]) -> LessonType:
    return LessonType(
        id=d["id"],
        name=d["name"],
        price_per_hour=Decimal(d["price_per_hour"]),
        duration_minutes=int(d["duration_minutes"]),
        description=d.get("description") or "",
    )


def _time_slot_to(t: TimeSlotTemplate) -> dict[str, Any]:
    return {
        "id": t.id,
        "day_of_week": t.day_of_week,
        "start_time": _iso(t.start_time),
        "end_time": _iso(t.end_time),
        "active": t.active,
    }


def _time_slot_from(d: dict[str, Any]) -> TimeSlotTemplate:
    return TimeSlotTemplate(
        id=d["id"],
        day_of_week=int(d["day_of_week"]),
        start_time=time.fromisoformat(d["start_time"]),
        end_time=time.fromisoformat(d["end_time"]),
        active=bool(d.get("active", True)),
    )


def _customer_to(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "email": c.email,
        "name": c.name,
        "surname": c.surname,
        "contact_number": c.contact_number,
        "created_at": _iso(c.created_at),
    }


def _customer_from(d: dict[str, Any]) -> Customer:
    return Customer(
        id=d["id"],
        email=d.get("email", ""),
        name=d.get("name", ""),
        surname=d.get("surname", ""),
        contact_number=d.get("contact_number", ""),
        created_at=_dt(d.get("created_at")),
    )

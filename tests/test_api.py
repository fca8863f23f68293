"""
HTTP tests for the public and admin routers.
"""

from __future__ import annotations

import base64
import tempfile
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase
from stablehub.application.use_cases.cart import CartUseCase
from stablehub.application.use_cases.checkout import CheckoutUseCase
from stablehub.application.use_cases.customers import CustomerUseCase
from stablehub.application.use_cases.notifications import NotificationUseCase
from stablehub.application.use_cases.order_lifecycle import OrderLifecycleUseCase
from stablehub.application.use_cases.verify_payment import PaymentProofGate
from stablehub.infrastructure.email.mock_email import MockEmailSender
from stablehub.infrastructure.storage.local_proof_storage import LocalProofStorage
from stablehub.infrastructure.store.memory_store import (
    MemoryCartStore,
    MemoryCatalog,
    MemoryCustomerDirectory,
    MemoryOrderLedger,
    MemoryReservationLedger,
    MemoryStore,
)
from stablehub.infrastructure.store.seed_data import seed
from stablehub.infrastructure.verification.mock_verifier import MockPaymentVerifier
from stablehub.main import app
from stablehub.wiring import dependencies as deps

TZ = ZoneInfo("Africa/Johannesburg")
RIDER = {"X-User-Id": "rider-1", "X-User-Email": "rider@example.com"}
OWNER = {"X-User-Id": "owner-1", "X-User-Email": "owner@stable.co.za"}
PROOF = {
    "filename": "eft.png",
    "content_type": "image/png",
    "data_base64": base64.b64encode(b"\x89PNG proof").decode("ascii"),
}


@pytest.fixture
def api():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = seed(MemoryStore())
        catalog = MemoryCatalog(store)
        reservations = MemoryReservationLedger(store)
        orders_ledger = MemoryOrderLedger(store)
        directory = MemoryCustomerDirectory(store)
        sender = MockEmailSender()
        proofs = LocalProofStorage(root_dir=tmpdir)

        bookings = BookingLifecycleUseCase(ledger=reservations, catalog=catalog, timezone=TZ)
        orders = OrderLifecycleUseCase(ledger=orders_ledger, timezone=TZ)
        carts = CartUseCase(store=MemoryCartStore(store), catalog=catalog)
        customers = CustomerUseCase(directory=directory, timezone=TZ)
        notifications = NotificationUseCase(
            sender=sender, proofs=proofs, operator_email="ops@example.com", timezone=TZ
        )
        checkout = CheckoutUseCase(
            catalog=catalog,
            bookings=bookings,
            orders=orders,
            carts=carts,
            gate=PaymentProofGate(MockPaymentVerifier()),
            proofs=proofs,
            notifications=notifications,
            max_proof_bytes=10 * 1024 * 1024,
            default_pickup_location="Main stable office",
        )
        admin = AdminService(
            orders=orders_ledger,
            reservations=reservations,
            catalog=catalog,
            customers=directory,
            admin_emails=["owner@stable.co.za"],
            timezone=TZ,
        )

        app.dependency_overrides.update(
            {
                deps.get_catalog: lambda: catalog,
                deps.get_booking_use_case: lambda: bookings,
                deps.get_order_use_case: lambda: orders,
                deps.get_cart_use_case: lambda: carts,
                deps.get_customer_use_case: lambda: customers,
                deps.get_notification_use_case: lambda: notifications,
                deps.get_checkout_use_case: lambda: checkout,
                deps.get_admin_service: lambda: admin,
            }
        )
        try:
            with TestClient(app) as client:
                yield client, sender
        finally:
            app.dependency_overrides.clear()


def test_health(api):
    """Health endpoint responds."""
    client, _ = api
    assert client.get("/health").json() == {"status": "ok"}


def test_lesson_types_and_quote(api):
    """Lesson types are public and quotes price weeks x duration."""
    client, _ = api

    types = client.get("/api/v1/lessons/types").json()
    quote = client.get("/api/v1/lessons/quote", params={"lesson_type_id": "private", "weeks": 4}).json()

    assert {t["id"] for t in types} == {"beginner", "private", "hack"}
    assert quote["total_amount"] == "1350.00"
    assert client.get("/api/v1/lessons/quote", params={"lesson_type_id": "nope"}).status_code == 404


def test_book_lesson_then_slot_is_taken(api):
    """Booking a slot marks it booked; booking it again is a conflict."""
    client, sender = api
    body = {
        "lesson_type_id": "beginner",
        "date": "2030-01-01",
        "start_time": "15:00",
        "end_time": "16:00",
        "weeks_booked": 1,
        "proof": PROOF,
        "submission_id": "sub-1",
    }

    created = client.post("/api/v1/lessons/bookings", json=body, headers=RIDER)
    slots = client.get("/api/v1/lessons/slots", params={"date": "2030-01-01"}).json()
    repeat = client.post("/api/v1/lessons/bookings", json={**body, "submission_id": "sub-2"}, headers=RIDER)

    assert created.status_code == 201
    data = created.json()
    assert data["booking"]["status"] == "pending"
    assert data["verification_summary"] == "AI VERIFIED (90% confidence)"
    assert data["message"] == "Payment proof verified successfully"
    assert [(s["start_time"], s["booked"]) for s in slots] == [("15:00:00", True), ("16:00:00", False)]
    assert repeat.status_code == 409
    assert len(sender.sent) == 1


def test_month_availability(api):
    """The month view lists every day with its status."""
    client, _ = api

    days = client.get("/api/v1/lessons/availability", params={"year": 2030, "month": 1}).json()

    assert len(days) == 31
    saturday = next(d for d in days if d["date"] == "2030-01-05")
    sunday = next(d for d in days if d["date"] == "2030-01-06")
    assert saturday["total_slots"] == 4
    assert saturday["status"] == "available"
    assert sunday["status"] == "full"


def test_requests_without_identity_are_refused(api):
    """Cart and booking routes need the caller id header."""
    client, _ = api

    assert client.get("/api/v1/shop/cart").status_code == 401


def test_cart_checkout_and_my_orders(api):
    """Items added to the cart become an order listed for the caller."""
    client, _ = api
    client.post("/api/v1/shop/cart/items", json={"product_id": "lucerne-bale", "quantity": 2}, headers=RIDER)
    cart = client.post("/api/v1/shop/cart/items", json={"product_id": "fly-spray"}, headers=RIDER).json()

    response = client.post("/api/v1/shop/checkout", json={"proof": PROOF}, headers=RIDER)
    mine = client.get("/api/v1/shop/orders", headers=RIDER).json()

    assert cart["total_items"] == 3
    assert cart["total_price"] == "515.00"
    assert response.status_code == 201
    order = response.json()["order"]
    assert order["total_amount"] == "515.00"
    assert order["status"] == "verified"
    assert order["pickup_location"] == "Main stable office"
    assert [o["id"] for o in mine] == [order["id"]]
    assert client.get("/api/v1/shop/cart", headers=RIDER).json()["lines"] == []


def test_checkout_validation_errors(api):
    """Empty carts, unknown products and bad proofs are client errors."""
    client, _ = api

    empty = client.post("/api/v1/shop/checkout", json={"proof": PROOF}, headers=RIDER)
    unknown = client.post("/api/v1/shop/cart/items", json={"product_id": "unicorn"}, headers=RIDER)
    client.post("/api/v1/shop/cart/items", json={"product_id": "fly-spray"}, headers=RIDER)
    bad_type = client.post(
        "/api/v1/shop/checkout",
        json={"proof": {**PROOF, "content_type": "text/plain"}},
        headers=RIDER,
    )
    bad_base64 = client.post(
        "/api/v1/shop/checkout",
        json={"proof": {**PROOF, "data_base64": "***"}},
        headers=RIDER,
    )

    assert empty.status_code == 400
    assert empty.json()["detail"]["field"] == "items"
    assert unknown.status_code == 404
    assert bad_type.status_code == 400
    assert bad_base64.status_code == 400


def test_register_and_me(api):
    """Registered profiles are returned for the caller."""
    client, _ = api
    body = {"name": "Thandi", "surname": "Mokoena", "email": "rider@example.com", "contact_number": "0821234567"}

    created = client.post("/api/v1/account/register", json={**body, "password": "abc"}, headers=RIDER)
    invalid = client.post("/api/v1/account/register", json={**body, "contact_number": "555"}, headers=RIDER)
    me = client.get("/api/v1/account/me", headers=RIDER).json()

    assert created.status_code == 201
    assert "password" not in created.json()
    assert invalid.status_code == 400
    assert me["full_name"] == "Thandi Mokoena"


def test_contact_form(api):
    """Contact messages are validated and emailed to the operator."""
    client, sender = api

    ok = client.post(
        "/api/v1/contact",
        json={"name": "Lerato", "email": "lerato@example.com", "subject": "Livery", "message": "Space?"},
    )
    bad = client.post(
        "/api/v1/contact",
        json={"name": "Lerato", "email": "nope", "subject": "Livery", "message": "Space?"},
    )

    assert ok.json() == {"delivered": True}
    assert bad.status_code == 400
    assert sender.sent[-1]["email_type"] == "Contact Form Submission"


def test_admin_routes_require_admin(api):
    """Non-admin callers are forbidden from the back office."""
    client, _ = api

    assert client.get("/api/v1/admin/orders", headers=RIDER).status_code == 403
    assert client.get("/api/v1/admin/orders").status_code == 401
    assert client.get("/api/v1/admin/orders", headers=OWNER).status_code == 200


def test_profile_email_does_not_grant_admin(api):
    """Registering with an admin address leaves the caller without back office access."""
    client, _ = api
    caller = {"X-User-Id": "rider-2", "X-User-Email": "rider2@example.com"}

    registered = client.post(
        "/api/v1/account/register",
        json={"name": "Sipho", "surname": "Ndlovu", "email": "owner@stable.co.za", "contact_number": "0821234567"},
        headers=caller,
    )

    assert registered.status_code == 201
    assert client.get("/api/v1/admin/orders", headers=caller).status_code == 403


def test_admin_booking_transitions(api):
    """Admins confirm and cancel bookings; invalid moves are conflicts."""
    client, _ = api
    booking = client.post(
        "/api/v1/lessons/bookings",
        json={
            "lesson_type_id": "beginner",
            "date": "2030-01-01",
            "start_time": "16:00",
            "end_time": "17:00",
            "proof": PROOF,
        },
        headers=RIDER,
    ).json()["booking"]

    cancelled = client.post(f"/api/v1/admin/bookings/{booking['id']}/cancel", headers=OWNER)
    confirm = client.post(f"/api/v1/admin/bookings/{booking['id']}/confirm", headers=OWNER)
    unknown = client.post("/api/v1/admin/bookings/missing/confirm", headers=OWNER)
    listed = client.get("/api/v1/admin/bookings", params={"status": "cancelled"}, headers=OWNER).json()

    assert cancelled.json()["status"] == "cancelled"
    assert confirm.status_code == 409
    assert unknown.status_code == 404
    assert listed[0]["lesson_type"]["name"] == "Beginner Lesson"


def test_admin_order_completion_emails_customer(api):
    """Completing an order notifies the customer by email."""
    client, sender = api
    client.post(
        "/api/v1/account/register",
        json={"name": "Thandi", "surname": "Mokoena", "email": "rider@example.com", "contact_number": "0821234567"},
        headers=RIDER,
    )
    client.post("/api/v1/shop/cart/items", json={"product_id": "fly-spray"}, headers=RIDER)
    order = client.post("/api/v1/shop/checkout", json={"proof": PROOF}, headers=RIDER).json()["order"]

    completed = client.post(f"/api/v1/admin/orders/{order['id']}/complete", headers=OWNER)
    again = client.post(f"/api/v1/admin/orders/{order['id']}/cancel", headers=OWNER)
    summary = client.get("/api/v1/admin/orders/summary", headers=OWNER).json()

    assert completed.json()["status"] == "completed"
    assert again.status_code == 409
    assert sender.sent[-1]["email_type"] == "Order Confirmation"
    assert sender.sent[-1]["to_email"] == "rider@example.com"
    assert summary["completed_orders"] == 1
    assert summary["total_profit"] == "55.00"


def test_admin_catalog_and_analytics(api):
    """Admins manage products and time slots and read analytics."""
    client, _ = api

    created = client.post(
        "/api/v1/admin/products",
        json={"name": "Hoof Oil", "price": "95.50", "category": "grooming"},
        headers=OWNER,
    )
    product_id = created.json()["id"]
    patched = client.patch(f"/api/v1/admin/products/{product_id}", json={"price": "99.00"}, headers=OWNER)
    deleted = client.delete(f"/api/v1/admin/products/{product_id}", headers=OWNER)
    slot = client.post(
        "/api/v1/admin/time-slots",
        json={"day_of_week": 0, "start_time": "09:00", "end_time": "10:00"},
        headers=OWNER,
    )
    analytics = client.get("/api/v1/admin/analytics", headers=OWNER)

    assert created.status_code == 201
    assert patched.json()["price"] == "99.00"
    assert deleted.status_code == 204
    assert slot.json()["day_of_week"] == 0
    assert analytics.status_code == 200
    assert len(analytics.json()["monthly_trends"]) == 6

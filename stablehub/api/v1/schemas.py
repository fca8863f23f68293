from __future__ import annotations

import base64
import binascii
from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from stablehub.domain.entities.availability import DayStatus
from stablehub.domain.entities.cart import Cart
from stablehub.domain.entities.order import OrderStatus
from stablehub.domain.entities.reservation import ReservationStatus
from stablehub.domain.entities.verification import ProofDocument, Verdict


class ORMSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---- shared ----

class ProofSchema(BaseModel):
    filename: str
    content_type: str
    data_base64: str

    def to_document(self) -> ProofDocument:
        try:
            data = base64.b64decode(self.data_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("Payment proof is not valid base64 data") from e
        return ProofDocument(filename=self.filename, content_type=self.content_type.lower(), data=data)


class VerificationResultSchema(ORMSchema):
    is_payment_proof: bool
    detected_amount: Decimal | None = None
    amount_matches: bool
    confidence: int
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    bank_name: str | None = None
    transaction_date: str | None = None
    reference_number: str | None = None
    reference_matches: bool = False
    document_type: str = "Unknown"


class VerificationOutcomeSchema(ORMSchema):
    success: bool
    verdict: Verdict
    confidence: int
    verification: VerificationResultSchema | None = None
    error: str | None = None


class CustomerSchema(ORMSchema):
    id: str
    email: str
    name: str = ""
    surname: str = ""
    full_name: str = ""
    contact_number: str = ""
    created_at: datetime | None = None


class RegisterRequestSchema(BaseModel):
    name: str
    surname: str
    email: str
    contact_number: str


class NotesRequestSchema(BaseModel):
    notes: str


# ---- lessons ----

class LessonTypeSchema(ORMSchema):
    id: str
    name: str
    price_per_hour: Decimal
    duration_minutes: int
    description: str = ""


class DayAvailabilitySchema(ORMSchema):
    date: date
    total_slots: int
    booked_slots: int
    remaining: int
    status: DayStatus
    completed_slots: int = 0


class SlotSchema(ORMSchema):
    template_id: str
    start_time: time
    end_time: time
    booked: bool


class QuoteSchema(BaseModel):
    lesson_type_id: str
    weeks_booked: int
    total_amount: Decimal


class ReservationSchema(ORMSchema):
    id: str
    user_id: str
    lesson_type_id: str
    date: date
    start_time: time
    end_time: time
    weeks_booked: int
    total_amount: Decimal
    status: ReservationStatus
    payment_proof_ref: str | None = None
    verification: VerificationOutcomeSchema | None = None
    notes: str = ""
    created_at: datetime | None = None


class ReservationDetailSchema(ORMSchema):
    reservation: ReservationSchema
    lesson_type: LessonTypeSchema | None = None
    customer: CustomerSchema | None = None


class LessonCheckoutRequestSchema(BaseModel):
    lesson_type_id: str
    date: date
    start_time: time
    end_time: time
    weeks_booked: int = Field(default=1, ge=1)
    proof: ProofSchema
    submission_id: str | None = None


class LessonCheckoutResponseSchema(BaseModel):
    booking: ReservationSchema
    verification: VerificationOutcomeSchema | None = None
    verification_summary: str
    message: str


# ---- shop ----

class ProductSchema(ORMSchema):
    id: str
    name: str
    price: Decimal
    category: str
    stock_quantity: int = 0
    description: str = ""
    image_url: str | None = None


class AdminProductSchema(ProductSchema):
    cost_price: Decimal = Decimal("0")
    created_at: datetime | None = None


class CartItemRequestSchema(BaseModel):
    product_id: str
    quantity: int = 1


class CartQuantityRequestSchema(BaseModel):
    quantity: int


class CartLineSchema(BaseModel):
    product: ProductSchema
    quantity: int
    line_total: Decimal


class CartSchema(BaseModel):
    lines: list[CartLineSchema]
    total_items: int
    total_price: Decimal

    @classmethod
    def from_cart(cls, cart: Cart) -> CartSchema:
        return cls(
            lines=[
                CartLineSchema(
                    product=ProductSchema.model_validate(line.product),
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in cart.lines
            ],
            total_items=cart.total_items(),
            total_price=cart.total_price(),
        )


class OrderItemSchema(ORMSchema):
    product_id: str
    name: str
    quantity: int
    price_at_purchase: Decimal
    category: str = ""
    line_total: Decimal


class OrderSchema(ORMSchema):
    id: str
    user_id: str
    items: list[OrderItemSchema]
    total_amount: Decimal
    status: OrderStatus
    payment_proof_ref: str | None = None
    verification: VerificationOutcomeSchema | None = None
    notes: str = ""
    pickup_location: str = ""
    created_at: datetime | None = None


class OrderDetailSchema(ORMSchema):
    order: OrderSchema
    customer: CustomerSchema | None = None


class CartCheckoutRequestSchema(BaseModel):
    proof: ProofSchema
    pickup_location: str | None = None
    submission_id: str | None = None


class OrderCheckoutResponseSchema(BaseModel):
    order: OrderSchema
    verification: VerificationOutcomeSchema | None = None
    verification_summary: str
    message: str


# ---- contact ----

class ContactRequestSchema(BaseModel):
    name: str
    email: str
    subject: str
    message: str
    phone: str | None = None


class ContactResponseSchema(BaseModel):
    delivered: bool


# ---- admin ----

class ProductCreateSchema(BaseModel):
    name: str
    price: Decimal
    cost_price: Decimal = Decimal("0")
    category: str = "feed"
    stock_quantity: int = 0
    description: str = ""
    image_url: str | None = None


class ProductUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    price: Decimal | None = None
    cost_price: Decimal | None = None
    category: str | None = None
    stock_quantity: int | None = None
    description: str | None = None
    image_url: str | None = None


class TimeSlotSchema(ORMSchema):
    id: str
    day_of_week: int
    start_time: time
    end_time: time
    active: bool


class TimeSlotCreateSchema(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    active: bool = True


class TimeSlotActiveSchema(BaseModel):
    active: bool


class ActivitySchema(ORMSchema):
    kind: str
    at: datetime


class CustomerStatsSchema(ORMSchema):
    customer: CustomerSchema
    total_orders: int
    total_bookings: int
    total_spent: Decimal
    last_activity: ActivitySchema | None = None
    tier: str


class MonthlyTrendSchema(ORMSchema):
    month: str
    orders: int
    bookings: int
    revenue: Decimal


class AnalyticsSchema(ORMSchema):
    total_revenue: Decimal
    monthly_revenue: Decimal
    total_orders: int
    total_bookings: int
    booking_revenue: Decimal
    top_products: list[tuple[str, int]]
    top_categories: list[tuple[str, Decimal]]
    monthly_trends: list[MonthlyTrendSchema]
    orders_by_status: dict[str, int]
    bookings_by_status: dict[str, int]


class OrderSummarySchema(ORMSchema):
    total_orders: int
    total_revenue: Decimal
    total_profit: Decimal
    completed_orders: int

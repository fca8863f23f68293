import logging

from fastapi import APIRouter, Depends, Response

from stablehub.api.v1.deps import DOMAIN_ERRORS, http_error, require_admin
from stablehub.api.v1.schemas import (
    AdminProductSchema,
    AnalyticsSchema,
    CustomerStatsSchema,
    NotesRequestSchema,
    OrderDetailSchema,
    OrderSchema,
    OrderSummarySchema,
    ProductCreateSchema,
    ProductUpdateSchema,
    ReservationDetailSchema,
    ReservationSchema,
    TimeSlotActiveSchema,
    TimeSlotCreateSchema,
    TimeSlotSchema,
)
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase
from stablehub.application.use_cases.customers import CustomerUseCase
from stablehub.application.use_cases.notifications import NotificationUseCase
from stablehub.application.use_cases.order_lifecycle import OrderLifecycleUseCase
from stablehub.domain.entities.order import Order, OrderStatus
from stablehub.domain.entities.reservation import ReservationStatus
from stablehub.wiring.dependencies import (
    get_admin_service,
    get_booking_use_case,
    get_catalog,
    get_customer_use_case,
    get_notification_use_case,
    get_order_use_case,
)

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


# ---- orders ----

@router.get("/orders", response_model=list[OrderDetailSchema])
def list_orders(status: OrderStatus | None = None, admin: AdminService = Depends(get_admin_service)):
    return [OrderDetailSchema.model_validate(d) for d in admin.list_orders(status)]


@router.get("/orders/summary", response_model=OrderSummarySchema)
def order_summary(status: OrderStatus | None = None, admin: AdminService = Depends(get_admin_service)):
    return OrderSummarySchema.model_validate(admin.order_summary(status))


@router.post("/orders/{order_id}/complete", response_model=OrderSchema)
def complete_order(
    order_id: str,
    uc: OrderLifecycleUseCase = Depends(get_order_use_case),
    customers: CustomerUseCase = Depends(get_customer_use_case),
    notifications: NotificationUseCase = Depends(get_notification_use_case),
):
    try:
        order = uc.complete(order_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    _notify_customer(order, customers, notifications)
    return OrderSchema.model_validate(order)


@router.post("/orders/{order_id}/cancel", response_model=OrderSchema)
def cancel_order(
    order_id: str,
    uc: OrderLifecycleUseCase = Depends(get_order_use_case),
    customers: CustomerUseCase = Depends(get_customer_use_case),
    notifications: NotificationUseCase = Depends(get_notification_use_case),
):
    try:
        order = uc.cancel(order_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    _notify_customer(order, customers, notifications)
    return OrderSchema.model_validate(order)


@router.patch("/orders/{order_id}/notes", response_model=OrderSchema)
def annotate_order(
    order_id: str,
    req: NotesRequestSchema,
    uc: OrderLifecycleUseCase = Depends(get_order_use_case),
):
    try:
        return OrderSchema.model_validate(uc.annotate(order_id, req.notes))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(order_id: str, uc: OrderLifecycleUseCase = Depends(get_order_use_case)):
    try:
        uc.delete(order_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


# ---- bookings ----

@router.get("/bookings", response_model=list[ReservationDetailSchema])
def list_bookings(status: ReservationStatus | None = None, admin: AdminService = Depends(get_admin_service)):
    return [ReservationDetailSchema.model_validate(d) for d in admin.list_bookings(status)]


@router.post("/bookings/{booking_id}/{action}", response_model=ReservationSchema)
def move_booking(
    booking_id: str,
    action: str,
    uc: BookingLifecycleUseCase = Depends(get_booking_use_case),
):
    transitions = {"confirm": uc.confirm, "complete": uc.complete, "cancel": uc.cancel}
    if action not in transitions:
        raise http_error(ValueError(f"Unknown booking action '{action}'"))
    try:
        return ReservationSchema.model_validate(transitions[action](booking_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.patch("/bookings/{booking_id}/notes", response_model=ReservationSchema)
def annotate_booking(
    booking_id: str,
    req: NotesRequestSchema,
    uc: BookingLifecycleUseCase = Depends(get_booking_use_case),
):
    try:
        return ReservationSchema.model_validate(uc.annotate(booking_id, req.notes))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/bookings/{booking_id}", status_code=204)
def delete_booking(booking_id: str, uc: BookingLifecycleUseCase = Depends(get_booking_use_case)):
    try:
        uc.delete(booking_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


# ---- catalog ----

@router.get("/products", response_model=list[AdminProductSchema])
def list_products(category: str | None = None, catalog: CatalogPort = Depends(get_catalog)):
    return [AdminProductSchema.model_validate(p) for p in catalog.list_products(category)]


@router.post("/products", response_model=AdminProductSchema, status_code=201)
def create_product(req: ProductCreateSchema, admin: AdminService = Depends(get_admin_service)):
    try:
        return AdminProductSchema.model_validate(admin.create_product(req.model_dump()))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.patch("/products/{product_id}", response_model=AdminProductSchema)
def update_product(
    product_id: str,
    req: ProductUpdateSchema,
    admin: AdminService = Depends(get_admin_service),
):
    try:
        return AdminProductSchema.model_validate(
            admin.update_product(product_id, req.model_dump(exclude_unset=True))
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: str, admin: AdminService = Depends(get_admin_service)):
    try:
        admin.delete_product(product_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


@router.get("/time-slots", response_model=list[TimeSlotSchema])
def list_time_slots(catalog: CatalogPort = Depends(get_catalog)):
    return [TimeSlotSchema.model_validate(t) for t in catalog.list_time_slots(active_only=False)]


@router.post("/time-slots", response_model=TimeSlotSchema, status_code=201)
def create_time_slot(req: TimeSlotCreateSchema, admin: AdminService = Depends(get_admin_service)):
    try:
        template = admin.create_time_slot(req.day_of_week, req.start_time, req.end_time, req.active)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return TimeSlotSchema.model_validate(template)


@router.patch("/time-slots/{template_id}", response_model=TimeSlotSchema)
def set_time_slot_active(
    template_id: str,
    req: TimeSlotActiveSchema,
    admin: AdminService = Depends(get_admin_service),
):
    try:
        return TimeSlotSchema.model_validate(admin.set_time_slot_active(template_id, req.active))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


# ---- customers & reporting ----

@router.get("/customers", response_model=list[CustomerStatsSchema])
def list_customers(search: str | None = None, admin: AdminService = Depends(get_admin_service)):
    return [CustomerStatsSchema.model_validate(c) for c in admin.list_customers(search)]


@router.get("/customers/{user_id}/orders", response_model=list[OrderSchema])
def customer_orders(user_id: str, admin: AdminService = Depends(get_admin_service)):
    return [OrderSchema.model_validate(o) for o in admin.user_orders(user_id)]


@router.get("/customers/{user_id}/bookings", response_model=list[ReservationDetailSchema])
def customer_bookings(user_id: str, admin: AdminService = Depends(get_admin_service)):
    return [ReservationDetailSchema.model_validate(d) for d in admin.user_bookings(user_id)]


@router.get("/analytics", response_model=AnalyticsSchema)
def analytics(admin: AdminService = Depends(get_admin_service)):
    return AnalyticsSchema.model_validate(admin.get_analytics())


def _notify_customer(order: Order, customers: CustomerUseCase, notifications: NotificationUseCase) -> None:
    customer = customers.resolve(order.user_id)
    if not customer.email:
        return
    try:
        notifications.order_status_changed(order, customer)
    except Exception as e:
        logger.error("Error sending status email", extra={"order_id": order.id, "error": str(e)})

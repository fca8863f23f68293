from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from stablehub.api.v1.deps import DOMAIN_ERRORS, get_caller, http_error
from stablehub.api.v1.schemas import (
    DayAvailabilitySchema,
    LessonCheckoutRequestSchema,
    LessonCheckoutResponseSchema,
    LessonTypeSchema,
    QuoteSchema,
    ReservationDetailSchema,
    ReservationSchema,
    SlotSchema,
    VerificationOutcomeSchema,
)
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase, quote_lesson
from stablehub.application.use_cases.checkout import CheckoutUseCase
from stablehub.application.use_cases.verify_payment import describe, summarize
from stablehub.domain.entities.customer import Customer
from stablehub.wiring.dependencies import (
    get_admin_service,
    get_booking_use_case,
    get_catalog,
    get_checkout_use_case,
)

router = APIRouter()


@router.get("/types", response_model=list[LessonTypeSchema])
def list_lesson_types(catalog: CatalogPort = Depends(get_catalog)):
    return [LessonTypeSchema.model_validate(t) for t in catalog.list_lesson_types()]


@router.get("/availability", response_model=list[DayAvailabilitySchema])
def month_availability(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    uc: BookingLifecycleUseCase = Depends(get_booking_use_case),
):
    days = uc.month_availability(year, month)
    return [DayAvailabilitySchema.model_validate(d) for d in days.values()]


@router.get("/slots", response_model=list[SlotSchema])
def slots_for_date(
    on: date = Query(..., alias="date"),
    uc: BookingLifecycleUseCase = Depends(get_booking_use_case),
):
    return [SlotSchema.model_validate(s) for s in uc.slots_for(on)]


@router.get("/quote", response_model=QuoteSchema)
def quote(
    lesson_type_id: str,
    weeks: int = 1,
    catalog: CatalogPort = Depends(get_catalog),
):
    lesson_type = catalog.get_lesson_type(lesson_type_id)
    if lesson_type is None:
        raise HTTPException(status_code=404, detail=f"Lesson type {lesson_type_id} not found.")
    try:
        total = quote_lesson(lesson_type, weeks)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return QuoteSchema(lesson_type_id=lesson_type.id, weeks_booked=weeks, total_amount=total)


@router.post("/bookings", response_model=LessonCheckoutResponseSchema, status_code=201)
def book_lesson(
    req: LessonCheckoutRequestSchema,
    caller: Customer = Depends(get_caller),
    uc: CheckoutUseCase = Depends(get_checkout_use_case),
):
    try:
        result = uc.checkout_lesson(
            customer=caller,
            lesson_type_id=req.lesson_type_id,
            on=req.date,
            start_time=req.start_time,
            end_time=req.end_time,
            weeks_booked=req.weeks_booked,
            proof=req.proof.to_document(),
            submission_id=req.submission_id,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)

    return LessonCheckoutResponseSchema(
        booking=ReservationSchema.model_validate(result.reservation),
        verification=(
            VerificationOutcomeSchema.model_validate(result.verification) if result.verification else None
        ),
        verification_summary=summarize(result.verification),
        message=describe(result.verification),
    )


@router.get("/bookings/mine", response_model=list[ReservationDetailSchema])
def my_bookings(
    caller: Customer = Depends(get_caller),
    admin: AdminService = Depends(get_admin_service),
):
    return [ReservationDetailSchema.model_validate(d) for d in admin.user_bookings(caller.id)]

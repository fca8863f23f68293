from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from stablehub.application.exceptions import (
    InvalidTransition,
    ParseFailure,
    RecordNotFound,
    SlotUnavailable,
    SubmissionInProgress,
    UpstreamFailure,
)
from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.customers import CustomerUseCase
from stablehub.domain.entities.customer import Customer
from stablehub.wiring.dependencies import get_admin_service, get_customer_use_case

DOMAIN_ERRORS = (
    ValueError,
    RecordNotFound,
    SlotUnavailable,
    InvalidTransition,
    SubmissionInProgress,
    UpstreamFailure,
    ParseFailure,
)


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, RecordNotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (SlotUnavailable, InvalidTransition, SubmissionInProgress)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (UpstreamFailure, ParseFailure)):
        return HTTPException(status_code=502, detail=str(e))
    detail: dict[str, str | None] = {"message": str(e), "field": getattr(e, "field", None)}
    return HTTPException(status_code=400, detail=detail)


def get_caller(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
    customers: CustomerUseCase = Depends(get_customer_use_case),
) -> Customer:
    """Caller identity as forwarded by the auth gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return customers.resolve(x_user_id.strip(), x_user_email)


def require_admin(
    caller: Customer = Depends(get_caller),
    x_user_email: str | None = Header(None),
    admin: AdminService = Depends(get_admin_service),
) -> Customer:
    # the profile email is user-supplied; only the gateway header is trusted here
    if not admin.is_admin(x_user_email):
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller

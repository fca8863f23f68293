from fastapi import APIRouter, Depends, Header, HTTPException

from stablehub.api.v1.deps import DOMAIN_ERRORS, get_caller, http_error
from stablehub.api.v1.schemas import CustomerSchema, RegisterRequestSchema
from stablehub.application.use_cases.customers import CustomerUseCase
from stablehub.domain.entities.customer import Customer
from stablehub.wiring.dependencies import get_customer_use_case

router = APIRouter()


@router.post("/register", response_model=CustomerSchema, status_code=201)
def register(
    req: RegisterRequestSchema,
    x_user_id: str | None = Header(None),
    uc: CustomerUseCase = Depends(get_customer_use_case),
):
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        customer = uc.register(
            user_id=x_user_id,
            email=req.email,
            name=req.name,
            surname=req.surname,
            contact_number=req.contact_number,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return CustomerSchema.model_validate(customer)


@router.get("/me", response_model=CustomerSchema)
def me(caller: Customer = Depends(get_caller)):
    return CustomerSchema.model_validate(caller)

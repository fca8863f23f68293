from fastapi import APIRouter, Depends, HTTPException

from stablehub.api.v1.deps import DOMAIN_ERRORS, get_caller, http_error
from stablehub.api.v1.schemas import (
    CartCheckoutRequestSchema,
    CartItemRequestSchema,
    CartQuantityRequestSchema,
    CartSchema,
    OrderCheckoutResponseSchema,
    OrderSchema,
    ProductSchema,
    VerificationOutcomeSchema,
)
from stablehub.application.ports.catalog import CatalogPort
from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.cart import CartUseCase
from stablehub.application.use_cases.checkout import CheckoutUseCase
from stablehub.application.use_cases.verify_payment import describe, summarize
from stablehub.domain.entities.customer import Customer
from stablehub.wiring.dependencies import (
    get_admin_service,
    get_cart_use_case,
    get_catalog,
    get_checkout_use_case,
)

router = APIRouter()


@router.get("/products", response_model=list[ProductSchema])
def list_products(category: str | None = None, catalog: CatalogPort = Depends(get_catalog)):
    return [ProductSchema.model_validate(p) for p in catalog.list_products(category)]


@router.get("/products/{product_id}", response_model=ProductSchema)
def get_product(product_id: str, catalog: CatalogPort = Depends(get_catalog)):
    product = catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found.")
    return ProductSchema.model_validate(product)


@router.get("/cart", response_model=CartSchema)
def get_cart(caller: Customer = Depends(get_caller), uc: CartUseCase = Depends(get_cart_use_case)):
    return CartSchema.from_cart(uc.get(caller.id))


@router.post("/cart/items", response_model=CartSchema)
def add_to_cart(
    req: CartItemRequestSchema,
    caller: Customer = Depends(get_caller),
    uc: CartUseCase = Depends(get_cart_use_case),
):
    try:
        cart = uc.add(caller.id, req.product_id, req.quantity)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return CartSchema.from_cart(cart)


@router.patch("/cart/items/{product_id}", response_model=CartSchema)
def update_cart_quantity(
    product_id: str,
    req: CartQuantityRequestSchema,
    caller: Customer = Depends(get_caller),
    uc: CartUseCase = Depends(get_cart_use_case),
):
    return CartSchema.from_cart(uc.update_quantity(caller.id, product_id, req.quantity))


@router.delete("/cart/items/{product_id}", response_model=CartSchema)
def remove_from_cart(
    product_id: str,
    caller: Customer = Depends(get_caller),
    uc: CartUseCase = Depends(get_cart_use_case),
):
    return CartSchema.from_cart(uc.remove(caller.id, product_id))


@router.delete("/cart", response_model=CartSchema)
def clear_cart(caller: Customer = Depends(get_caller), uc: CartUseCase = Depends(get_cart_use_case)):
    return CartSchema.from_cart(uc.clear(caller.id))


@router.post("/checkout", response_model=OrderCheckoutResponseSchema, status_code=201)
def checkout(
    req: CartCheckoutRequestSchema,
    caller: Customer = Depends(get_caller),
    uc: CheckoutUseCase = Depends(get_checkout_use_case),
):
    try:
        result = uc.checkout_cart(
            customer=caller,
            proof=req.proof.to_document(),
            pickup_location=req.pickup_location,
            submission_id=req.submission_id,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)

    return OrderCheckoutResponseSchema(
        order=OrderSchema.model_validate(result.order),
        verification=(
            VerificationOutcomeSchema.model_validate(result.verification) if result.verification else None
        ),
        verification_summary=summarize(result.verification),
        message=describe(result.verification),
    )


@router.get("/orders", response_model=list[OrderSchema])
def my_orders(caller: Customer = Depends(get_caller), admin: AdminService = Depends(get_admin_service)):
    return [OrderSchema.model_validate(o) for o in admin.user_orders(caller.id)]

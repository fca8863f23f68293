from fastapi import APIRouter, Depends

from stablehub.api.v1.deps import DOMAIN_ERRORS, http_error
from stablehub.api.v1.schemas import ContactRequestSchema, ContactResponseSchema
from stablehub.application.use_cases.notifications import NotificationUseCase
from stablehub.wiring.dependencies import get_notification_use_case

router = APIRouter()


@router.post("", response_model=ContactResponseSchema)
def send_contact_message(
    req: ContactRequestSchema,
    uc: NotificationUseCase = Depends(get_notification_use_case),
):
    try:
        delivered = uc.contact_message(
            name=req.name,
            email=req.email,
            subject=req.subject,
            message=req.message,
            phone=req.phone,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return ContactResponseSchema(delivered=delivered)

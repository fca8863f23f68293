import logging

from fastapi import FastAPI

from stablehub.api.v1.account import router as account_router
from stablehub.api.v1.admin import router as admin_router
from stablehub.api.v1.contact import router as contact_router
from stablehub.api.v1.lessons import router as lessons_router
from stablehub.api.v1.shop import router as shop_router
from stablehub.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "booking_id",
            "order_id",
            "submission_id",
            "product_id",
            "status",
            "previous",
            "verdict",
            "confidence",
            "email_type",
            "error",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title=f"{settings.BUSINESS_NAME} API", version="1.0.0")

app.include_router(lessons_router, prefix="/api/v1/lessons", tags=["lessons"])
app.include_router(shop_router, prefix="/api/v1/shop", tags=["shop"])
app.include_router(account_router, prefix="/api/v1/account", tags=["account"])
app.include_router(contact_router, prefix="/api/v1/contact", tags=["contact"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: Decimal
    category: str = "feed"
    cost_price: Decimal = Decimal("0")
    stock_quantity: int = 0
    description: str = ""
    image_url: str | None = None
    created_at: datetime | None = None

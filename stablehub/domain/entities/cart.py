from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stablehub.domain.entities.product import Product


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class Cart:
    """Cart lines keyed by product id. Every mutation returns a new cart."""

    lines: tuple[CartLine, ...] = ()

    def get(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add(self, product: Product, quantity: int = 1) -> Cart:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")
        if self.get(product.id) is None:
            return Cart(self.lines + (CartLine(product=product, quantity=quantity),))
        return Cart(
            tuple(
                CartLine(product=product, quantity=line.quantity + quantity)
                if line.product.id == product.id
                else line
                for line in self.lines
            )
        )

    def remove(self, product_id: str) -> Cart:
        return Cart(tuple(line for line in self.lines if line.product.id != product_id))

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        updated = (
            CartLine(product=line.product, quantity=max(0, quantity))
            if line.product.id == product_id
            else line
            for line in self.lines
        )
        return Cart(tuple(line for line in updated if line.quantity > 0))

    def clear(self) -> Cart:
        return Cart()

    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    def quantities(self) -> dict[str, int]:
        return {line.product.id: line.quantity for line in self.lines}

    @property
    def is_empty(self) -> bool:
        return not self.lines

from __future__ import annotations

import logging

from stablehub.application.exceptions import RecordNotFound, ValidationError
from stablehub.application.ports.cart_store import CartStorePort
from stablehub.application.ports.catalog import CatalogPort
from stablehub.domain.entities.cart import Cart, CartLine


class CartUseCase:
    """Server-held carts, rehydrated with live product prices on every read."""

    def __init__(self, store: CartStorePort, catalog: CatalogPort) -> None:
        self._store = store
        self._catalog = catalog
        self._logger = logging.getLogger(__name__)

    def get(self, owner_id: str) -> Cart:
        lines: list[CartLine] = []
        for product_id, quantity in self._store.load(owner_id).items():
            product = self._catalog.get_product(product_id)
            if product is None or quantity < 1:
                # product deleted since it was added
                continue
            lines.append(CartLine(product=product, quantity=quantity))
        return Cart(tuple(lines))

    def add(self, owner_id: str, product_id: str, quantity: int = 1) -> Cart:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1", field="quantity")
        product = self._catalog.get_product(product_id)
        if product is None:
            raise RecordNotFound(f"Product {product_id} not found.")
        if product.stock_quantity <= 0:
            raise ValidationError(f"{product.name} is out of stock", field="product_id")
        return self._save(owner_id, self.get(owner_id).add(product, quantity))

    def remove(self, owner_id: str, product_id: str) -> Cart:
        return self._save(owner_id, self.get(owner_id).remove(product_id))

    def update_quantity(self, owner_id: str, product_id: str, quantity: int) -> Cart:
        return self._save(owner_id, self.get(owner_id).update_quantity(product_id, quantity))

    def clear(self, owner_id: str) -> Cart:
        return self._save(owner_id, Cart())

    def _save(self, owner_id: str, cart: Cart) -> Cart:
        self._store.save(owner_id, cart.quantities())
        self._logger.debug("Cart saved", extra={"owner_id": owner_id, "items": cart.total_items()})
        return cart

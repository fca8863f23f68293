from abc import ABC, abstractmethod


class CartStorePort(ABC):
    @abstractmethod
    def load(self, owner_id: str) -> dict[str, int]:
        """Return product_id -> quantity for the owner's cart, in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def save(self, owner_id: str, quantities: dict[str, int]) -> None:
        raise NotImplementedError

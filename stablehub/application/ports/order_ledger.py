from __future__ import annotations

from abc import ABC, abstractmethod

from stablehub.domain.entities.order import Order, OrderStatus


class OrderLedgerPort(ABC):
    @abstractmethod
    def insert(self, order: Order) -> Order:
        """Persist an order together with its items."""
        raise NotImplementedError

    @abstractmethod
    def get(self, order_id: str) -> Order | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_submission(self, submission_id: str) -> Order | None:
        raise NotImplementedError

    @abstractmethod
    def list(self, status: OrderStatus | None = None, user_id: str | None = None) -> list[Order]:
        """List orders, newest first."""
        raise NotImplementedError

    @abstractmethod
    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Atomically move an order to `status`; raises InvalidTransition if the stored status forbids it."""
        raise NotImplementedError

    @abstractmethod
    def update_notes(self, order_id: str, notes: str) -> Order:
        raise NotImplementedError

    @abstractmethod
    def delete(self, order_id: str) -> bool:
        """Delete the order and its items."""
        raise NotImplementedError

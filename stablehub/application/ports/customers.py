from abc import ABC, abstractmethod

from stablehub.domain.entities.customer import Customer


class CustomerDirectoryPort(ABC):
    @abstractmethod
    def get(self, customer_id: str) -> Customer | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, customer: Customer) -> Customer:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[Customer]:
        """List customers, newest first."""
        raise NotImplementedError

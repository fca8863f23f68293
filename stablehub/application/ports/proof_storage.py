from abc import ABC, abstractmethod

from stablehub.domain.entities.verification import ProofDocument


class ProofStoragePort(ABC):
    @abstractmethod
    def upload(self, owner_id: str, document: ProofDocument) -> str:
        """Store a payment proof. Returns the storage reference."""
        raise NotImplementedError

    @abstractmethod
    def public_url(self, ref: str) -> str | None:
        raise NotImplementedError

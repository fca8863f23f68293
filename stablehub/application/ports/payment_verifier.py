from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from stablehub.domain.entities.verification import ProofDocument, VerificationResult


class PaymentVerifierPort(ABC):
    @abstractmethod
    def verify(
        self,
        document: ProofDocument,
        expected_amount: Decimal,
        expected_reference: str = "",
    ) -> VerificationResult:
        """
        Judge whether a document proves a payment of `expected_amount`.

        Raises:
            UpstreamFailure: provider unreachable, timed out or errored
            ParseFailure: provider output had no usable JSON object
        """
        raise NotImplementedError

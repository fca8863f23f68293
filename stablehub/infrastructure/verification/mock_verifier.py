from __future__ import annotations

import logging
from decimal import Decimal

from stablehub.application.ports.payment_verifier import PaymentVerifierPort
from stablehub.domain.entities.verification import ProofDocument, VerificationResult


class MockPaymentVerifier(PaymentVerifierPort):
    """Accepts every document as a matching proof, unless configured with a fixed result."""

    def __init__(self, result: VerificationResult | None = None) -> None:
        self._result = result
        self._logger = logging.getLogger(__name__)

    def verify(
        self,
        document: ProofDocument,
        expected_amount: Decimal,
        expected_reference: str = "",
    ) -> VerificationResult:
        self._logger.info(
            "Mock payment verification",
            extra={"proof_filename": document.filename, "expected": str(expected_amount)},
        )
        if self._result is not None:
            return self._result
        return VerificationResult(
            is_payment_proof=True,
            detected_amount=expected_amount,
            amount_matches=True,
            confidence=90,
            is_valid=True,
            document_type="Mock EFT confirmation",
        )

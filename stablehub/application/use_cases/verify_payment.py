from __future__ import annotations

import logging
from decimal import Decimal

from stablehub.application.exceptions import ParseFailure, UpstreamFailure
from stablehub.application.ports.payment_verifier import PaymentVerifierPort
from stablehub.domain.entities.verification import (
    ProofDocument,
    VerificationOutcome,
    VerificationResult,
    Verdict,
)

VERIFIED_MIN_CONFIDENCE = 70
LOW_CONFIDENCE_MIN = 50


def classify(result: VerificationResult) -> Verdict:
    if result.confidence >= VERIFIED_MIN_CONFIDENCE and result.is_valid and result.amount_matches:
        return Verdict.verified
    if not result.is_valid or result.confidence < LOW_CONFIDENCE_MIN:
        return Verdict.failed
    return Verdict.low_confidence


def summarize(outcome: VerificationOutcome | None) -> str:
    """One-line summary for operator emails and the admin back office."""
    if outcome is None:
        return "No AI verification performed"
    confidence = outcome.confidence
    if outcome.verdict is Verdict.verified:
        return f"AI VERIFIED ({confidence}% confidence)"
    if outcome.verdict is Verdict.low_confidence:
        return f"LOW CONFIDENCE ({confidence}% confidence)"
    if outcome.verdict is Verdict.failed:
        return f"VERIFICATION FAILED ({confidence}% confidence)"
    return "Manual review required"


def describe(outcome: VerificationOutcome | None) -> str:
    """Customer-facing wording shown after an upload."""
    if outcome is None or outcome.verification is None:
        return "Verification failed, your payment will be reviewed manually"
    v = outcome.verification
    if outcome.verdict is Verdict.verified:
        return "Payment proof verified successfully"
    if v.is_payment_proof and v.amount_matches:
        return "Payment proof appears valid but with some concerns"
    if v.is_payment_proof and not v.amount_matches:
        return "Payment proof detected but amount mismatch"
    if not v.is_payment_proof:
        return "Document does not appear to be a payment proof"
    return "Payment proof verification inconclusive"


def details(outcome: VerificationOutcome | None) -> str:
    if outcome is None or outcome.verification is None:
        return ""
    v = outcome.verification
    lines = [
        "AI Verification Details:",
        f"- Payment Proof Valid: {'Yes' if v.is_payment_proof else 'No'}",
        f"- Amount Matches: {'Yes' if v.amount_matches else 'No'}",
        f"- Detected Amount: R{v.detected_amount if v.detected_amount is not None else 'Not detected'}",
        f"- Bank Name: {v.bank_name or 'Not detected'}",
        f"- Document Type: {v.document_type or 'Unknown'}",
        f"- Confidence Score: {v.confidence}%",
    ]
    if v.issues:
        lines.append(f"- Issues Found: {', '.join(v.issues)}")
    return "\n".join(lines)


class PaymentProofGate:
    """
    Advisory verification of payment proofs.

    Never raises for verifier failures and never changes any status: an
    unreachable verifier or unparseable answer yields an unsuccessful outcome
    with verdict `manual_review`.
    """

    def __init__(self, verifier: PaymentVerifierPort) -> None:
        self._verifier = verifier
        self._logger = logging.getLogger(__name__)

    def verify(
        self,
        document: ProofDocument,
        expected_amount: Decimal,
        expected_reference: str = "",
    ) -> VerificationOutcome:
        try:
            result = self._verifier.verify(document, expected_amount, expected_reference)
        except (UpstreamFailure, ParseFailure) as e:
            self._logger.warning(
                "Payment verification unavailable",
                extra={"error": str(e), "verdict": Verdict.manual_review.value},
            )
            return VerificationOutcome(success=False, verdict=Verdict.manual_review, error=str(e))

        verdict = classify(result)
        self._logger.info(
            "Payment proof verified",
            extra={"verdict": verdict.value, "confidence": result.confidence, "expected": str(expected_amount)},
        )
        return VerificationOutcome(success=True, verdict=verdict, verification=result)

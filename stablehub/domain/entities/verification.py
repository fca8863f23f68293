from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Verdict(str, Enum):
    verified = "verified"
    low_confidence = "low_confidence"
    failed = "failed"
    manual_review = "manual_review"


@dataclass(frozen=True)
class ProofDocument:
    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        if "." in self.filename:
            return self.filename.rsplit(".", 1)[-1].lower()
        return "pdf" if self.content_type == "application/pdf" else "jpg"


@dataclass(frozen=True)
class VerificationResult:
    is_payment_proof: bool
    detected_amount: Decimal | None
    amount_matches: bool
    confidence: int  # 0-100
    is_valid: bool
    issues: tuple[str, ...] = ()
    bank_name: str | None = None
    transaction_date: str | None = None
    reference_number: str | None = None
    reference_matches: bool = False
    document_type: str = "Unknown"


@dataclass(frozen=True)
class VerificationOutcome:
    """Advisory result of one proof upload, attached to exactly one reservation or order."""

    success: bool
    verdict: Verdict
    verification: VerificationResult | None = None
    error: str | None = None

    @property
    def confidence(self) -> int:
        return self.verification.confidence if self.verification else 0

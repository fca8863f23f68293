from __future__ import annotations

import json
import re
from typing import Any

from stablehub.application.exceptions import ParseFailure
from stablehub.application.utils.money import to_decimal
from stablehub.domain.entities.verification import VerificationResult

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the outermost {...} out of free-form model output."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        snippet = (text or "")[:200].replace("\n", " ")
        raise ParseFailure(f"No JSON object in verification response. Snippet: {snippet!r}")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseFailure(f"Invalid JSON in verification response: {e}") from e
    if not isinstance(data, dict):
        raise ParseFailure("Verification response must be a JSON object.")
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


def _as_confidence(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(round(min(100.0, max(0.0, number))))


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_verification(data: dict[str, Any]) -> VerificationResult:
    issues = data.get("issues")
    amount = to_decimal(data.get("detectedAmount"))
    return VerificationResult(
        is_payment_proof=_as_bool(data.get("isPaymentProof")),
        detected_amount=amount,
        amount_matches=_as_bool(data.get("amountMatches")),
        confidence=_as_confidence(data.get("confidence")),
        is_valid=_as_bool(data.get("isValid")),
        issues=tuple(str(i) for i in issues) if isinstance(issues, list) else (),
        bank_name=_as_text(data.get("bankName")),
        transaction_date=_as_text(data.get("transactionDate")),
        reference_number=_as_text(data.get("referenceNumber")),
        reference_matches=_as_bool(data.get("referenceMatches")),
        document_type=_as_text(data.get("documentType")) or "Unknown",
    )


def parse_verification_text(text: str) -> VerificationResult:
    return normalize_verification(extract_json_object(text))

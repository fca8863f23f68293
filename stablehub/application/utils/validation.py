from __future__ import annotations

import re

from stablehub.application.exceptions import ValidationError
from stablehub.domain.entities.verification import ProofDocument

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# South African numbers: +27 or 0 followed by nine digits
PHONE_RE = re.compile(r"^(\+27|0)[0-9]{9}$")

ALLOWED_PROOF_TYPES = frozenset({"image/jpeg", "image/png", "image/jpg", "application/pdf"})


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_RE.match(re.sub(r"\s", "", value or "")))


def require_text(value: str | None, field: str, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required", field=field)
    return text


def validate_email(value: str | None, field: str = "email") -> str:
    email = require_text(value, field, "Email")
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address", field=field)
    return email


def validate_phone(value: str | None, field: str = "contact_number") -> str:
    phone = require_text(value, field, "Contact number")
    if not is_valid_phone(phone):
        raise ValidationError("Please enter a valid South African phone number", field=field)
    return re.sub(r"\s", "", phone)


def validate_proof_document(document: ProofDocument | None, max_bytes: int) -> ProofDocument:
    if document is None or not document.data:
        raise ValidationError("Please upload your payment proof first", field="proof")
    if len(document.data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(f"File size must be less than {limit_mb}MB", field="proof")
    if document.content_type not in ALLOWED_PROOF_TYPES:
        raise ValidationError("Please upload a PDF or image file (JPG, PNG)", field="proof")
    return document

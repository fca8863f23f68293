"""
Tests for payment proof verification: parsing, verdicts and the OpenAI adapter.
"""

from __future__ import annotations

import base64
from decimal import Decimal
from types import SimpleNamespace

import pytest

from stablehub.application.exceptions import ParseFailure, UpstreamFailure
from stablehub.application.use_cases.verify_payment import (
    PaymentProofGate,
    classify,
    describe,
    details,
    summarize,
)
from stablehub.domain.entities.verification import ProofDocument, VerificationOutcome, VerificationResult, Verdict
from stablehub.infrastructure.verification.mock_verifier import MockPaymentVerifier
from stablehub.infrastructure.verification.openai_verifier import OpenAIPaymentVerifier
from stablehub.infrastructure.verification.parsing import extract_json_object, parse_verification_text
from stablehub.infrastructure.verification.prompts import build_verify_prompt


def _result(confidence: int, is_valid: bool = True, amount_matches: bool = True, is_proof: bool = True) -> VerificationResult:
    return VerificationResult(
        is_payment_proof=is_proof,
        detected_amount=Decimal("130.00"),
        amount_matches=amount_matches,
        confidence=confidence,
        is_valid=is_valid,
    )


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_classify_thresholds():
    """70+ valid and matching is verified; below 50 or invalid is failed; the rest is low confidence."""
    assert classify(_result(70)) is Verdict.verified
    assert classify(_result(69)) is Verdict.low_confidence
    assert classify(_result(90, amount_matches=False)) is Verdict.low_confidence
    assert classify(_result(50)) is Verdict.low_confidence
    assert classify(_result(49)) is Verdict.failed
    assert classify(_result(95, is_valid=False)) is Verdict.failed


def test_summaries():
    """Operator summaries name the verdict and confidence."""
    assert summarize(None) == "No AI verification performed"
    verified = VerificationOutcome(success=True, verdict=Verdict.verified, verification=_result(88))
    low = VerificationOutcome(success=True, verdict=Verdict.low_confidence, verification=_result(60))
    failed = VerificationOutcome(success=True, verdict=Verdict.failed, verification=_result(45, is_valid=False))
    review = VerificationOutcome(success=False, verdict=Verdict.manual_review, error="timeout")

    assert summarize(verified) == "AI VERIFIED (88% confidence)"
    assert summarize(low) == "LOW CONFIDENCE (60% confidence)"
    assert summarize(failed) == "VERIFICATION FAILED (45% confidence)"
    assert summarize(review) == "Manual review required"


def test_customer_descriptions():
    """Customer wording distinguishes mismatched amounts and non-payment documents."""
    mismatch = VerificationOutcome(
        success=True, verdict=Verdict.low_confidence, verification=_result(80, amount_matches=False)
    )
    not_proof = VerificationOutcome(
        success=True, verdict=Verdict.failed, verification=_result(20, is_valid=False, is_proof=False)
    )

    assert describe(mismatch) == "Payment proof detected but amount mismatch"
    assert describe(not_proof) == "Document does not appear to be a payment proof"
    assert describe(None).startswith("Verification failed")


def test_details_lists_issues():
    """The detail block includes detected amount and any issues."""
    result = VerificationResult(
        is_payment_proof=True,
        detected_amount=Decimal("130.00"),
        amount_matches=True,
        confidence=75,
        is_valid=True,
        issues=("Date is blurry",),
        bank_name="FNB",
    )
    text = details(VerificationOutcome(success=True, verdict=Verdict.verified, verification=result))

    assert "- Detected Amount: R130.00" in text
    assert "- Bank Name: FNB" in text
    assert "- Issues Found: Date is blurry" in text


def test_parse_clamps_confidence_and_reads_amount():
    """Confidence is clamped to 0-100 and rand amounts are parsed."""
    text = 'Here you go: {"isPaymentProof": true, "detectedAmount": "R1,300.50", "amountMatches": true, "confidence": 140, "isValid": true, "issues": ["none"]} thanks'

    result = parse_verification_text(text)

    assert result.confidence == 100
    assert result.detected_amount == Decimal("1300.50")
    assert result.issues == ("none",)
    assert result.document_type == "Unknown"
    assert parse_verification_text('{"confidence": -5}').confidence == 0
    assert parse_verification_text('{"confidence": "abc"}').confidence == 0


def test_parse_keeps_zero_amount_apart_from_missing():
    """A detected amount of zero is reported, not treated as undetected."""
    assert parse_verification_text('{"detectedAmount": 0}').detected_amount == Decimal("0")
    assert parse_verification_text('{"detectedAmount": null}').detected_amount is None


def test_parse_rejects_non_json():
    """Output without a JSON object is a parse failure."""
    with pytest.raises(ParseFailure):
        extract_json_object("I cannot read this image")
    with pytest.raises(ParseFailure):
        extract_json_object("{not json}")


def test_gate_turns_failures_into_manual_review():
    """Upstream and parse failures produce an unsuccessful manual review outcome."""

    class Broken(MockPaymentVerifier):
        def verify(self, document, expected_amount, expected_reference=""):
            raise ParseFailure("garbage")

    proof = ProofDocument("p.png", "image/png", b"x")
    outcome = PaymentProofGate(Broken()).verify(proof, Decimal("100"))

    assert outcome.success is False
    assert outcome.verdict is Verdict.manual_review
    assert outcome.error == "garbage"
    assert outcome.confidence == 0


def test_prompt_mentions_expected_amount():
    """The prompt carries the expected amount in rand."""
    assert "R130.00" in build_verify_prompt(Decimal("130"), "")


def test_openai_verifier_sends_image_and_parses():
    """Images are sent as data URLs and the JSON answer is parsed."""
    completions = FakeCompletions(
        content='{"isPaymentProof": true, "detectedAmount": 130, "amountMatches": true, "confidence": 82, "isValid": true}'
    )
    verifier = OpenAIPaymentVerifier(client=_fake_client(completions), model="test-model")
    proof = ProofDocument("p.png", "image/png", b"img")

    result = verifier.verify(proof, Decimal("130.00"))

    assert result.confidence == 82
    assert result.detected_amount == Decimal("130")
    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["response_format"] == {"type": "json_object"}
    part = call["messages"][1]["content"][1]
    assert part["type"] == "image_url"
    assert part["image_url"]["url"] == "data:image/png;base64," + base64.b64encode(b"img").decode("ascii")


def test_openai_verifier_sends_pdf_as_file():
    """PDF proofs go out as file parts."""
    completions = FakeCompletions(content='{"confidence": 10}')
    verifier = OpenAIPaymentVerifier(client=_fake_client(completions), model="test-model")

    verifier.verify(ProofDocument("statement.pdf", "application/pdf", b"%PDF"), Decimal("10"))

    part = completions.calls[0]["messages"][1]["content"][1]
    assert part["type"] == "file"
    assert part["file"]["filename"] == "statement.pdf"


def test_openai_verifier_error_mapping():
    """Provider exceptions are upstream failures; empty output is a parse failure."""
    proof = ProofDocument("p.png", "image/png", b"img")

    broken = OpenAIPaymentVerifier(client=_fake_client(FakeCompletions(error=RuntimeError("boom"))), model="m")
    with pytest.raises(UpstreamFailure):
        broken.verify(proof, Decimal("1"))

    empty = OpenAIPaymentVerifier(client=_fake_client(FakeCompletions(content="")), model="m")
    with pytest.raises(ParseFailure):
        empty.verify(proof, Decimal("1"))

from __future__ import annotations

import base64
import logging
from decimal import Decimal
from typing import Any

from openai import OpenAI

from stablehub.application.exceptions import ParseFailure, UpstreamFailure
from stablehub.application.ports.payment_verifier import PaymentVerifierPort
from stablehub.core.config import settings
from stablehub.domain.entities.verification import ProofDocument, VerificationResult
from stablehub.infrastructure.verification.parsing import parse_verification_text
from stablehub.infrastructure.verification.prompts import build_verify_prompt


class OpenAIPaymentVerifier(PaymentVerifierPort):
    """
    OpenAI vision-backed adapter implementing PaymentVerifierPort.

    Contract guarantees:
    - verify returns a VerificationResult with confidence clamped to 0-100
    - Raises:
        UpstreamFailure: networking/provider failures
        ParseFailure: empty output, no JSON object, or wrong shape
    """

    def __init__(self, client: OpenAI | None = None, model: str | None = None) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY, timeout=30.0)
        self._model = model or settings.OPENAI_MODEL_VERIFY
        self._logger = logging.getLogger(__name__)

    def verify(
        self,
        document: ProofDocument,
        expected_amount: Decimal,
        expected_reference: str = "",
    ) -> VerificationResult:
        prompt = build_verify_prompt(expected_amount, expected_reference)
        text = self._call_text(prompt, document)
        return parse_verification_text(text)

    def _call_text(self, prompt: str, document: ProofDocument) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": [{"type": "text", "text": prompt}, _document_part(document)]},
                ],
                temperature=settings.OPENAI_TEMPERATURE_VERIFY,
                max_tokens=800,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise UpstreamFailure(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise ParseFailure("Verifier returned empty response text.")
        return content


def _document_part(document: ProofDocument) -> dict[str, Any]:
    encoded = base64.b64encode(document.data).decode("ascii")
    data_url = f"data:{document.content_type};base64,{encoded}"
    if document.content_type == "application/pdf":
        return {"type": "file", "file": {"filename": document.filename, "file_data": data_url}}
    return {"type": "image_url", "image_url": {"url": data_url}}

"""
Tests for operator emails, the contact form and the EmailJS adapter.
"""

from __future__ import annotations

import json
import tempfile
from zoneinfo import ZoneInfo

import httpx
import pytest

from stablehub.application.exceptions import ValidationError
from stablehub.application.use_cases.notifications import TEMPLATE_KEYS, NotificationUseCase, build_template, short_id
from stablehub.infrastructure.email.emailjs_client import EmailJSClient
from stablehub.infrastructure.email.mock_email import MockEmailSender
from stablehub.infrastructure.storage.local_proof_storage import LocalProofStorage

TZ = ZoneInfo("Africa/Johannesburg")


def _notifications(tmpdir: str) -> tuple[NotificationUseCase, MockEmailSender]:
    sender = MockEmailSender()
    uc = NotificationUseCase(
        sender=sender,
        proofs=LocalProofStorage(root_dir=tmpdir),
        operator_email="ops@example.com",
        timezone=TZ,
    )
    return uc, sender


def test_template_has_every_key():
    """Unused keys are sent as empty strings; unknown keys are refused."""
    params = build_template(to_email="a@b.co", email_type="Test")

    assert set(params) == set(TEMPLATE_KEYS)
    assert params["order_items"] == ""
    with pytest.raises(KeyError):
        build_template(colour="blue")


def test_short_id():
    """Ids are shortened to eight characters for subject lines."""
    assert short_id("0123456789abcdef") == "01234567"
    assert short_id(None) == "Pending"


def test_contact_message_is_validated_and_sent():
    """Contact messages reach the operator with a placeholder for a missing phone."""
    with tempfile.TemporaryDirectory() as tmpdir:
        uc, sender = _notifications(tmpdir)

        assert uc.contact_message("Lerato", "lerato@example.com", "Livery", "Do you have space?") is True

        params = sender.sent[0]
        assert params["email_type"] == "Contact Form Submission"
        assert params["customer_phone"] == "Not provided"
        assert params["contact_message"] == "Do you have space?"
        with pytest.raises(ValidationError):
            uc.contact_message("Lerato", "not-an-email", "Livery", "Hi")
        with pytest.raises(ValidationError):
            uc.contact_message("Lerato", "lerato@example.com", "Livery", "   ")
        assert len(sender.sent) == 1


def test_emailjs_client_posts_payload():
    """The adapter posts the service, template, keys and params as JSON."""
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, text="OK")

    client = EmailJSClient(
        service_id="svc",
        template_id="tpl",
        public_key="pub",
        private_key="priv",
        send_endpoint="https://email.test/send",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )

    assert client.send({"email_type": "Test"}) is True
    assert seen[0] == {
        "service_id": "svc",
        "template_id": "tpl",
        "user_id": "pub",
        "accessToken": "priv",
        "template_params": {"email_type": "Test"},
    }


def test_emailjs_client_reports_failure_without_raising():
    """Rejected requests and transport errors both return False."""
    rejected = EmailJSClient(
        service_id="svc",
        template_id="tpl",
        public_key="pub",
        send_endpoint="https://email.test/send",
        client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(400, text="bad template"))),
    )

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    offline = EmailJSClient(
        service_id="svc",
        template_id="tpl",
        public_key="pub",
        send_endpoint="https://email.test/send",
        client=httpx.Client(transport=httpx.MockTransport(unreachable)),
    )

    assert rejected.send({"email_type": "Test"}) is False
    assert offline.send({"email_type": "Test"}) is False

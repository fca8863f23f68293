from __future__ import annotations

import logging
from typing import Any

import httpx

from stablehub.application.ports.email_sender import EmailSenderPort


class EmailJSClient(EmailSenderPort):
    def __init__(
        self,
        service_id: str,
        template_id: str,
        public_key: str,
        send_endpoint: str,
        private_key: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._service_id = service_id
        self._template_id = template_id
        self._public_key = public_key
        self._private_key = private_key
        self._send_endpoint = send_endpoint
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send(self, template_params: dict[str, str]) -> bool:
        payload: dict[str, Any] = {
            "service_id": self._service_id,
            "template_id": self._template_id,
            "user_id": self._public_key,
            "template_params": template_params,
        }
        if self._private_key:
            payload["accessToken"] = self._private_key

        try:
            resp = self._client.post(self._send_endpoint, json=payload)
        except httpx.HTTPError as e:
            self._logger.error(
                "Email send failed",
                extra={"error": str(e), "email_type": template_params.get("email_type")},
            )
            return False

        if resp.status_code >= 400:
            self._logger.error(
                "Email send rejected",
                extra={
                    "status": resp.status_code,
                    "error": resp.text[:200],
                    "email_type": template_params.get("email_type"),
                },
            )
            return False

        self._logger.info("Email sent", extra={"email_type": template_params.get("email_type")})
        return True

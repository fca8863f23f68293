from __future__ import annotations

import logging

from stablehub.application.ports.email_sender import EmailSenderPort


class MockEmailSender(EmailSenderPort):
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send(self, template_params: dict[str, str]) -> bool:
        self.sent.append(dict(template_params))
        self._logger.info(
            "Mock email",
            extra={"email_type": template_params.get("email_type"), "to_email": template_params.get("to_email")},
        )
        return True

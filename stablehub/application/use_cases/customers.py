from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from stablehub.application.ports.customers import CustomerDirectoryPort
from stablehub.application.utils.validation import (
    require_text,
    validate_email,
    validate_phone,
)
from stablehub.domain.entities.customer import Customer


class CustomerUseCase:
    """Customer profiles. Credentials live with the upstream auth provider; only the profile is kept here."""

    def __init__(self, directory: CustomerDirectoryPort, timezone: ZoneInfo) -> None:
        self._directory = directory
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def register(
        self,
        user_id: str,
        email: str,
        name: str,
        surname: str,
        contact_number: str,
    ) -> Customer:
        name = require_text(name, "name", "First name")
        surname = require_text(surname, "surname", "Last name")
        email = validate_email(email)
        phone = validate_phone(contact_number)

        customer = Customer(
            id=require_text(user_id, "user_id", "User id"),
            email=email,
            name=name,
            surname=surname,
            contact_number=phone,
            created_at=datetime.now(self._timezone),
        )
        saved = self._directory.save(customer)
        self._logger.info("Customer registered", extra={"customer_id": saved.id})
        return saved

    def resolve(self, user_id: str, email: str | None = None) -> Customer:
        """Profile for a caller; falls back to a bare profile when none was registered."""
        customer = self._directory.get(user_id)
        if customer is not None:
            return customer
        return Customer(id=user_id, email=email or "")

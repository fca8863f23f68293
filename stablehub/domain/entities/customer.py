from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Customer:
    id: str
    email: str
    name: str = ""
    surname: str = ""
    contact_number: str = ""
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

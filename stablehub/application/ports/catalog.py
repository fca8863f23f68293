from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from stablehub.domain.entities.product import Product
from stablehub.domain.entities.reservation import LessonType
from stablehub.domain.entities.time_slot import TimeSlotTemplate


class CatalogPort(ABC):
    @abstractmethod
    def list_products(self, category: str | None = None) -> list[Product]:
        """List products ordered by name."""
        raise NotImplementedError

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        raise NotImplementedError

    @abstractmethod
    def save_product(self, product: Product) -> Product:
        """Insert or replace a product by id."""
        raise NotImplementedError

    @abstractmethod
    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product:
        raise NotImplementedError

    @abstractmethod
    def delete_product(self, product_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_lesson_types(self) -> list[LessonType]:
        raise NotImplementedError

    @abstractmethod
    def get_lesson_type(self, lesson_type_id: str) -> LessonType | None:
        raise NotImplementedError

    @abstractmethod
    def save_lesson_type(self, lesson_type: LessonType) -> LessonType:
        raise NotImplementedError

    @abstractmethod
    def list_time_slots(self, active_only: bool = True) -> list[TimeSlotTemplate]:
        """List weekly time-slot templates ordered by day and start time."""
        raise NotImplementedError

    @abstractmethod
    def save_time_slot(self, template: TimeSlotTemplate) -> TimeSlotTemplate:
        raise NotImplementedError

from __future__ import annotations

from datetime import time
from decimal import Decimal

from stablehub.domain.entities.product import Product
from stablehub.domain.entities.reservation import LessonType
from stablehub.domain.entities.time_slot import TimeSlotTemplate
from stablehub.infrastructure.store.memory_store import MemoryStore

LESSON_TYPES: dict[str, LessonType] = {
    "beginner": LessonType(
        id="beginner",
        name="Beginner Lesson",
        price_per_hour=Decimal("350.00"),
        duration_minutes=60,
        description="Groundwork, mounting and walk/trot on a schoolmaster.",
    ),
    "private": LessonType(
        id="private",
        name="Private Lesson",
        price_per_hour=Decimal("450.00"),
        duration_minutes=45,
        description="One-on-one flatwork or jumping with an instructor.",
    ),
    "hack": LessonType(
        id="hack",
        name="Outride",
        price_per_hour=Decimal("300.00"),
        duration_minutes=90,
        description="Guided outride for confident riders.",
    ),
}

# Tuesday to Saturday; day_of_week uses Sunday = 0
_WEEKLY_HOURS = {
    2: [(time(15, 0), time(16, 0)), (time(16, 0), time(17, 0))],
    3: [(time(15, 0), time(16, 0)), (time(16, 0), time(17, 0))],
    4: [(time(15, 0), time(16, 0)), (time(16, 0), time(17, 0))],
    5: [(time(14, 0), time(15, 0)), (time(15, 0), time(16, 0))],
    6: [(time(8, 0), time(9, 0)), (time(9, 0), time(10, 0)), (time(10, 0), time(11, 0)), (time(11, 0), time(12, 0))],
}

TIME_SLOTS: list[TimeSlotTemplate] = [
    TimeSlotTemplate(id=f"slot-{day}-{start:%H%M}", day_of_week=day, start_time=start, end_time=end)
    for day, hours in _WEEKLY_HOURS.items()
    for start, end in hours
]

PRODUCTS: list[Product] = [
    Product(id="lucerne-bale", name="Lucerne Bale", price=Decimal("185.00"), cost_price=Decimal("140.00"), category="feed", stock_quantity=40),
    Product(id="horse-cubes-40kg", name="Horse Cubes 40kg", price=Decimal("420.00"), cost_price=Decimal("330.00"), category="feed", stock_quantity=25),
    Product(id="riding-gloves", name="Riding Gloves", price=Decimal("260.00"), cost_price=Decimal("150.00"), category="apparel", stock_quantity=12),
    Product(id="grooming-kit", name="Grooming Kit", price=Decimal("550.00"), cost_price=Decimal("320.00"), category="grooming", stock_quantity=8),
    Product(id="fly-spray", name="Fly Spray 500ml", price=Decimal("145.00"), cost_price=Decimal("90.00"), category="health", stock_quantity=30),
]


def seed(store: MemoryStore) -> MemoryStore:
    """Populate an empty store with the default catalog."""
    with store.lock:
        if store.lesson_types or store.products or store.time_slots:
            return store
        with store.mutation():
            store.lesson_types.update(LESSON_TYPES)
            store.time_slots.update({t.id: t for t in TIME_SLOTS})
            store.products.update({p.id: p for p in PRODUCTS})
    return store

"""Synthetic product generator for seeding a demo catalog."""

from __future__ import annotations

import random
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

from catalogsearch.models.document import Product

BRANDS = (
    "Apple", "Samsung", "Dell", "HP", "Lenovo", "Asus", "Acer", "Microsoft",
    "LG", "Sony", "Intel", "AMD", "Razer", "MSI", "Toshiba",
)  # fmt: skip

CATEGORIES = (
    "Laptops", "Smartphones", "Tablets", "Desktops", "Monitors",
    "Accessories", "Gaming", "Office", "Student", "Professional",
)  # fmt: skip

PRODUCT_TYPES = (
    "Laptop", "Smartphone", "Tablet", "Desktop", "Monitor",
    "Keyboard", "Mouse", "Headphones", "Camera", "Printer",
)  # fmt: skip

ADJECTIVES = (
    "Professional", "Gaming", "Ultra", "Premium", "Basic",
    "Advanced", "Smart", "Portable", "Powerful", "Lightweight",
)  # fmt: skip

FEATURES = (
    "4K Display", "Touch Screen", "Fast Charging", "Wireless",
    "Bluetooth", "High Performance", "Long Battery Life",
    "Ergonomic Design", "RGB Lighting", "Compact",
)  # fmt: skip


def generate_product(product_id: int, rng: random.Random, now: datetime) -> Product:
    """Generate one random product with id ``str(product_id)``."""
    product_type = rng.choice(PRODUCT_TYPES)
    adjective = rng.choice(ADJECTIVES)
    brand = rng.choice(BRANDS)

    categories = rng.sample(CATEGORIES, rng.randint(2, 3))

    return Product(
        id=str(product_id),
        name=f"{brand} {adjective} {product_type}",
        description=(
            f"A {adjective} {product_type} featuring {rng.choice(FEATURES)} and {rng.choice(FEATURES)}. "
            "Perfect for daily use."
        ),
        price=int((100 + rng.random() * 2900) * 100) / 100,
        categories=categories,
        brand=brand,
        in_stock=rng.random() > 0.2,
        rating=1 + rng.random() * 4,
        created_at=now - timedelta(days=rng.randrange(365)),
    )


def generate_products(count: int, seed: int | None = None, now: datetime | None = None) -> Iterator[Product]:
    """Lazily yield *count* products with ids ``"1"`` .. ``str(count)``.

    The same *seed* and *now* always produce the same products.
    """
    rng = random.Random(seed)
    now = now or datetime.now(UTC)
    for product_id in range(1, count + 1):
        yield generate_product(product_id, rng, now)

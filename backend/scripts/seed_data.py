"""Seed the catalog with the equipment a catering rental business typically stocks.

Items that already exist (matched by name) are left untouched, so the script
can be re-run safely. Uses whichever gateway backend the environment selects.

Run from the ``backend`` directory:
    python -m scripts.seed_data
"""

import asyncio
import logging
from decimal import Decimal

from catering_rentals.config import Settings
from catering_rentals.gateway import DataGateway, create_gateway
from catering_rentals.main import configure_logging

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

# Prices are per item per booking, in rupees
CATALOG = [
    {"name": "Degh (Large)", "category": "Cooking", "price": Decimal("500.00")},
    {"name": "Degh (Medium)", "category": "Cooking", "price": Decimal("350.00")},
    {"name": "Degh (Small)", "category": "Cooking", "price": Decimal("200.00")},
    {"name": "Tawa", "category": "Cooking", "price": Decimal("150.00")},
    {"name": "Chair", "category": "Seating", "price": Decimal("50.00")},
    {"name": "Sofa Set", "category": "Seating", "price": Decimal("1200.00")},
    {"name": "Table", "category": "Furniture", "price": Decimal("300.00")},
    {"name": "Round Table", "category": "Furniture", "price": Decimal("400.00")},
    {"name": "Tangna", "category": "Utensils", "price": Decimal("30.00")},
    {"name": "Serving Spoon", "category": "Utensils", "price": Decimal("10.00")},
    {"name": "Plate", "category": "Serving", "price": Decimal("15.00")},
    {"name": "Glass", "category": "Serving", "price": Decimal("5.00")},
    {"name": "Water Drum", "category": "Storage", "price": Decimal("100.00")},
    {"name": "Wash Basin Stand", "category": "Facilities", "price": Decimal("250.00")},
    {"name": "Flower Stand", "category": "Decoration", "price": Decimal("150.00")},
    {"name": "Gas Burner", "category": "Equipment", "price": Decimal("400.00")},
    {"name": "Mattress", "category": "Comfort", "price": Decimal("120.00")},
]


async def seed(gateway: DataGateway) -> int:
    """Insert missing catalog items; return how many were added."""
    existing = {row["name"] for row in await gateway.select("items")}
    missing = [dict(item, is_active=True) for item in CATALOG if item["name"] not in existing]
    if not missing:
        logger.info("Catalog already seeded (%d items)", len(existing))
        return 0
    await gateway.insert("items", missing)
    logger.info("Seeded %d catalog items", len(missing))
    return len(missing)


async def main() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    gateway = create_gateway(settings)
    try:
        await seed(gateway)
    finally:
        await gateway.aclose()


if __name__ == "__main__":
    asyncio.run(main())

"""Catalog and customer lookups used by the booking wizard."""

import logging
from collections.abc import Sequence

from catering_rentals.gateway import DataGateway, asc, desc, eq
from catering_rentals.schemas.customer import CustomerResponse
from catering_rentals.schemas.item import CategoryGroup, ItemResponse

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
UNCATEGORIZED = "Other"
DEFAULT_ICON = "📦"

CATEGORY_ICONS: dict[str, str] = {
    "Cooking": "🍲",
    "Utensils": "🍴",
    "Serving": "🍽️",
    "Storage": "📦",
    "Facilities": "🚿",
    "Seating": "🪑",
    "Furniture": "🪑",
    "Decoration": "🎨",
    "Equipment": "🔧",
    "Comfort": "🛏️",
}


async def load_catalog(gateway: DataGateway) -> list[ItemResponse]:
    """Active items, by category then most expensive first."""
    rows = await gateway.select(
        "items",
        filters=[eq("is_active", True)],
        order=[asc("category"), desc("price")],
    )
    return [ItemResponse.model_validate(row) for row in rows]


async def load_customers(gateway: DataGateway) -> list[CustomerResponse]:
    rows = await gateway.select("customers", order=[asc("name")])
    return [CustomerResponse.model_validate(row) for row in rows]


def category_options(items: Sequence[ItemResponse]) -> list[str]:
    """``all`` followed by each distinct non-empty category in catalog order."""
    return [ALL_CATEGORIES, *dict.fromkeys(item.category for item in items if item.category)]


def filter_items(items: Sequence[ItemResponse], search: str = "", category: str = ALL_CATEGORIES) -> list[ItemResponse]:
    """Case-insensitive name substring match and exact category match."""
    needle = search.lower()
    return [
        item
        for item in items
        if needle in item.name.lower() and (category == ALL_CATEGORIES or item.category == category)
    ]


def group_items(items: Sequence[ItemResponse]) -> list[CategoryGroup]:
    groups: dict[str, list[ItemResponse]] = {}
    for item in items:
        groups.setdefault(item.category or UNCATEGORIZED, []).append(item)
    return [
        CategoryGroup(category=category, icon=CATEGORY_ICONS.get(category, DEFAULT_ICON), items=members)
        for category, members in groups.items()
    ]

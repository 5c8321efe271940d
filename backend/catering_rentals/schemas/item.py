"""Pydantic v2 schemas for the rental catalog."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ItemResponse(BaseModel):
    """A catalog item with its current price."""

    id: uuid.UUID
    name: str
    category: str | None = None
    price: Decimal
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategoryGroup(BaseModel):
    category: str
    icon: str
    items: list[ItemResponse]


class CatalogResponse(BaseModel):
    """Browsing view of the active catalog after search/category filtering."""

    categories: list[str]
    search: str
    category: str
    groups: list[CategoryGroup]
    total: int

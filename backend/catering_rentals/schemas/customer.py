"""Pydantic v2 schemas for customer rows and writes."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CustomerCreate(BaseModel):
    """Payload inserted into ``customers`` when a booking introduces a new customer."""

    name: str = Field(..., min_length=1, max_length=255)
    contact_number: str = Field(..., min_length=1, max_length=50)
    address: str | None = None


class CustomerUpdate(BaseModel):
    """Full rewrite of a customer's contact fields."""

    name: str
    contact_number: str
    address: str | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CustomerResponse(BaseModel):
    """A stored customer."""

    id: uuid.UUID
    name: str
    contact_number: str
    address: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

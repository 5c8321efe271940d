"""Schemas for transient UI feedback: toasts and delayed redirects."""

from typing import Literal

from pydantic import BaseModel, Field

ToastType = Literal["success", "error", "warning"]


class Toast(BaseModel):
    """An auto-dismissing notification."""

    message: str
    type: ToastType
    duration_ms: int = Field(3000, ge=0)


class Redirect(BaseModel):
    """Navigate to ``to`` after ``delay_ms`` milliseconds."""

    to: str = "/"
    delay_ms: int = Field(0, ge=0)

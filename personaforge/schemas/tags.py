"""Pydantic schemas for tag endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class TagAttachRequest(CamelModel):
    """Attach a tag (created if missing) to an identity."""

    tag_name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


class TagResponse(CamelModel):
    """Schema for tag response."""

    id: int
    name: str
    color: str
    created_at: datetime

"""Tag Pydantic schemas.

Shared by document tags and report tags.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AddTagRequest(BaseModel):
    """Request body for adding (or recoloring) a tag."""

    name: str = Field(..., description="Tag name (1-50 chars after trimming)")
    color: str | None = Field(default=None, description="Hex color #RRGGBB")


class TagOut(BaseModel):
    """Response schema for a tag."""

    id: UUID
    name: str
    color: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

"""User Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    """Response schema for the signed-in user's profile."""

    id: UUID
    email: str
    name: str | None
    avatar_url: str | None
    provider: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

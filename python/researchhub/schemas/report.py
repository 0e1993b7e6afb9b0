"""Report Pydantic schemas.

Contains request and response models for report endpoints.
Name validation (trim, 1-200 chars) happens in the service layer so that
invalid names surface as E_NAME_INVALID rather than a generic validation error.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from researchhub.schemas.tag import TagOut

# =============================================================================
# Request Schemas
# =============================================================================


class CreateReportRequest(BaseModel):
    """Request body for creating a report."""

    name: str = Field(..., description="Report name (1-200 chars)")


class UpdateReportRequest(BaseModel):
    """Request body for updating a report. At least one field is required."""

    name: str | None = None
    content: str | None = None


# =============================================================================
# Response Schemas
# =============================================================================


class ReportOut(BaseModel):
    """Response schema for a report."""

    id: UUID
    user_id: UUID
    name: str
    content: str
    tags: list[TagOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags")
    @classmethod
    def sort_tags(cls, tags: list[TagOut]) -> list[TagOut]:
        return sorted(tags, key=lambda t: t.name)

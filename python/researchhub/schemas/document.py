"""Document Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from researchhub.schemas.tag import TagOut


class UpdateDocumentRequest(BaseModel):
    """Request body for updating document metadata. At least one field is required."""

    filename: str | None = None
    notes: str | None = None


class DocumentOut(BaseModel):
    """Response schema for a document.

    storage_path is internal and never exposed.
    """

    id: UUID
    report_id: UUID
    filename: str
    file_hash: str
    size_bytes: int
    mime_type: str
    parsed_content: str | None
    notes: str
    tags: list[TagOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags")
    @classmethod
    def sort_tags(cls, tags: list[TagOut]) -> list[TagOut]:
        return sorted(tags, key=lambda t: t.name)

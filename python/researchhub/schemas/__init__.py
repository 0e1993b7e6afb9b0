"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from researchhub.schemas.document import DocumentOut, UpdateDocumentRequest
from researchhub.schemas.report import CreateReportRequest, ReportOut, UpdateReportRequest
from researchhub.schemas.tag import AddTagRequest, TagOut
from researchhub.schemas.user import UserOut

__all__ = [
    # Reports
    "CreateReportRequest",
    "UpdateReportRequest",
    "ReportOut",
    # Documents
    "UpdateDocumentRequest",
    "DocumentOut",
    # Tags
    "AddTagRequest",
    "TagOut",
    # Users
    "UserOut",
]

"""Ownership checks shared by the report, document and tag services.

Every document and tag operation is authorized through the parent report's
owner. These loaders are the single source of truth for that rule:
- Missing or soft-deleted rows raise NotFoundError
- Rows owned by someone else raise ForbiddenError
"""

from uuid import UUID

from sqlalchemy.orm import Session

from researchhub.db.models import Document, Report
from researchhub.errors import ApiErrorCode, ForbiddenError, NotFoundError
from researchhub.repositories import DocumentRepository, ReportRepository


def load_report_for_owner(db: Session, viewer_id: UUID, report_id: UUID) -> Report:
    """Load an active report and check that the viewer owns it.

    Raises:
        NotFoundError: If the report is missing or soft-deleted.
        ForbiddenError: If the viewer does not own the report.
    """
    report = ReportRepository(db).find_by_id(report_id)
    if report is None:
        raise NotFoundError(ApiErrorCode.E_REPORT_NOT_FOUND, "Report not found")
    if report.user_id != viewer_id:
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "You do not have access to this report")
    return report


def load_document_for_owner(db: Session, viewer_id: UUID, document_id: UUID) -> Document:
    """Load an active document (under an active report) owned by the viewer.

    Raises:
        NotFoundError: If the document or its report is missing or soft-deleted.
        ForbiddenError: If the viewer does not own the parent report.
    """
    document = DocumentRepository(db).find_by_id(document_id)
    if document is None:
        raise NotFoundError(ApiErrorCode.E_DOCUMENT_NOT_FOUND, "Document not found")
    if document.report.user_id != viewer_id:
        raise ForbiddenError(ApiErrorCode.E_FORBIDDEN, "You do not have access to this document")
    return document

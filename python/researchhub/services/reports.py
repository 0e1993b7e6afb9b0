"""Report service layer.

All report-domain business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Access rules:
- A missing or soft-deleted report is E_REPORT_NOT_FOUND (404)
- An existing report owned by someone else is E_FORBIDDEN (403)
"""

from uuid import UUID

from sqlalchemy.orm import Session

from researchhub.db.models import Report, utcnow
from researchhub.db.session import transaction
from researchhub.errors import ApiErrorCode, InvalidRequestError
from researchhub.logging import get_logger
from researchhub.repositories import ReportRepository
from researchhub.schemas.report import ReportOut
from researchhub.services.access import load_report_for_owner

logger = get_logger(__name__)

MAX_REPORT_NAME_LENGTH = 200


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name or len(name) > MAX_REPORT_NAME_LENGTH:
        raise InvalidRequestError(
            ApiErrorCode.E_NAME_INVALID,
            f"Name must be 1-{MAX_REPORT_NAME_LENGTH} characters",
        )
    return name


def validate_search_query(query: str | None) -> str:
    """Trim a search query, rejecting blank input."""
    query = (query or "").strip()
    if not query:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Search query is required")
    return query


def create_report(db: Session, viewer_id: UUID, name: str) -> ReportOut:
    """Create a new report owned by the viewer.

    Args:
        db: Database session.
        viewer_id: The ID of the user creating the report.
        name: The report name (will be trimmed).

    Returns:
        The created report.

    Raises:
        InvalidRequestError: If name is empty or > 200 chars.
    """
    name = _validate_name(name)

    with transaction(db):
        report = ReportRepository(db).save(Report(user_id=viewer_id, name=name, content=""))

    logger.info("report_created", report_id=str(report.id))
    return ReportOut.model_validate(report)


def get_report(db: Session, viewer_id: UUID, report_id: UUID) -> ReportOut:
    """Get a single report.

    Raises:
        NotFoundError: If the report is missing or deleted.
        ForbiddenError: If the viewer does not own it.
    """
    return ReportOut.model_validate(load_report_for_owner(db, viewer_id, report_id))


def list_reports(db: Session, viewer_id: UUID) -> list[ReportOut]:
    """List the viewer's active reports, newest first."""
    reports = ReportRepository(db).find_by_user_id(viewer_id)
    return [ReportOut.model_validate(r) for r in reports]


def update_report(
    db: Session,
    viewer_id: UUID,
    report_id: UUID,
    name: str | None = None,
    content: str | None = None,
) -> ReportOut:
    """Update a report's name and/or content.

    Raises:
        InvalidRequestError: If no field is given or the name is invalid.
        NotFoundError: If the report is missing or deleted.
        ForbiddenError: If the viewer does not own it.
    """
    if name is None and content is None:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST, "At least one of name or content is required"
        )
    if name is not None:
        name = _validate_name(name)

    with transaction(db):
        report = load_report_for_owner(db, viewer_id, report_id)
        if name is not None:
            report.name = name
        if content is not None:
            report.content = content
        report.updated_at = utcnow()
        ReportRepository(db).save(report)

    return ReportOut.model_validate(report)


def delete_report(db: Session, viewer_id: UUID, report_id: UUID) -> None:
    """Soft-delete a report.

    The row stays in the table with deleted_at set; its documents become
    invisible through the parent filter.

    Raises:
        NotFoundError: If the report is missing or already deleted.
        ForbiddenError: If the viewer does not own it.
    """
    with transaction(db):
        load_report_for_owner(db, viewer_id, report_id)
        ReportRepository(db).soft_delete(report_id)

    logger.info("report_deleted", report_id=str(report_id))


def search_reports(db: Session, viewer_id: UUID, query: str | None) -> list[ReportOut]:
    """Search the viewer's active reports by name or content.

    Raises:
        InvalidRequestError: If the query is blank.
    """
    query = validate_search_query(query)
    reports = ReportRepository(db).search(viewer_id, query)
    return [ReportOut.model_validate(r) for r in reports]

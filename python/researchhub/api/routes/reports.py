"""Report routes.

Routes are transport-only:
- Extract viewer from request.state
- Call exactly one service function
- Return success(...) or raise ApiError

IMPORTANT: /reports/search must be registered BEFORE /reports/{report_id}
to prevent path capture.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from researchhub.api.deps import get_db
from researchhub.auth.middleware import Viewer, get_viewer
from researchhub.responses import success_response
from researchhub.schemas.report import CreateReportRequest, UpdateReportRequest
from researchhub.services import reports as reports_service

router = APIRouter()


@router.get("/reports")
def list_reports(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List the viewer's reports, newest first."""
    result = reports_service.list_reports(db, viewer.user_id)
    return success_response([r.model_dump(mode="json") for r in result])


@router.post("/reports", status_code=201)
def create_report(
    body: CreateReportRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a new report."""
    result = reports_service.create_report(db, viewer.user_id, body.name)
    return success_response(result.model_dump(mode="json"))


@router.get("/reports/search")
def search_reports(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    q: Annotated[str | None, Query(description="Search text")] = None,
) -> dict:
    """Search the viewer's reports by name or content."""
    result = reports_service.search_reports(db, viewer.user_id, q)
    return success_response([r.model_dump(mode="json") for r in result])


@router.get("/reports/{report_id}")
def get_report(
    report_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = reports_service.get_report(db, viewer.user_id, report_id)
    return success_response(result.model_dump(mode="json"))


@router.patch("/reports/{report_id}")
def update_report(
    report_id: UUID,
    body: UpdateReportRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update a report's name and/or content."""
    result = reports_service.update_report(
        db, viewer.user_id, report_id, name=body.name, content=body.content
    )
    return success_response(result.model_dump(mode="json"))


@router.delete("/reports/{report_id}", status_code=204)
def delete_report(
    report_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Soft-delete a report."""
    reports_service.delete_report(db, viewer.user_id, report_id)
    return Response(status_code=204)

"""Tag routes for documents and reports."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from researchhub.api.deps import get_db
from researchhub.auth.middleware import Viewer, get_viewer
from researchhub.responses import success_response
from researchhub.schemas.tag import AddTagRequest
from researchhub.services import tags as tags_service

router = APIRouter()


@router.get("/documents/{document_id}/tags")
def list_document_tags(
    document_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tags_service.list_document_tags(db, viewer.user_id, document_id)
    return success_response([t.model_dump(mode="json") for t in result])


@router.post("/documents/{document_id}/tags", status_code=201)
def add_document_tag(
    document_id: UUID,
    body: AddTagRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Add a tag to a document. Re-adding an existing name updates its color."""
    result = tags_service.add_document_tag(
        db, viewer.user_id, document_id, body.name, color=body.color
    )
    return success_response(result.model_dump(mode="json"))


@router.delete("/documents/{document_id}/tags/{name}", status_code=204)
def remove_document_tag(
    document_id: UUID,
    name: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    tags_service.remove_document_tag(db, viewer.user_id, document_id, name)
    return Response(status_code=204)


@router.get("/reports/{report_id}/tags")
def list_report_tags(
    report_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = tags_service.list_report_tags(db, viewer.user_id, report_id)
    return success_response([t.model_dump(mode="json") for t in result])


@router.post("/reports/{report_id}/tags", status_code=201)
def add_report_tag(
    report_id: UUID,
    body: AddTagRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Add a tag to a report. Re-adding an existing name updates its color."""
    result = tags_service.add_report_tag(db, viewer.user_id, report_id, body.name, color=body.color)
    return success_response(result.model_dump(mode="json"))


@router.delete("/reports/{report_id}/tags/{name}", status_code=204)
def remove_report_tag(
    report_id: UUID,
    name: str,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    tags_service.remove_report_tag(db, viewer.user_id, report_id, name)
    return Response(status_code=204)

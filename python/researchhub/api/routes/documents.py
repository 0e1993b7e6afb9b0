"""Document routes.

Routes are transport-only:
- Extract viewer from request.state
- Call exactly one service function
- Return success(...) or raise ApiError

Uploads are multipart: a "file" part and an optional comma-separated "tags" field.
"""

from typing import Annotated
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.orm import Session

from researchhub.api.deps import get_db, get_parser, get_storage
from researchhub.auth.middleware import Viewer, get_viewer
from researchhub.config import get_settings
from researchhub.parser import ParserClient
from researchhub.responses import success_response
from researchhub.schemas.document import UpdateDocumentRequest
from researchhub.services import documents as documents_service
from researchhub.storage import StorageClientBase

router = APIRouter()


def _split_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t for t in (part.strip() for part in raw.split(",")) if t]


# =============================================================================
# Report-scoped routes
# =============================================================================


@router.get("/reports/{report_id}/documents")
def list_documents(
    report_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List a report's documents, newest first."""
    result = documents_service.list_documents(db, viewer.user_id, report_id)
    return success_response([d.model_dump(mode="json") for d in result])


@router.post("/reports/{report_id}/documents", status_code=201)
def upload_document(
    report_id: UUID,
    file: Annotated[UploadFile, File(description="Document bytes")],
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    storage_client: Annotated[StorageClientBase, Depends(get_storage)],
    parser: Annotated[ParserClient, Depends(get_parser)],
    tags: Annotated[str | None, Form(description="Comma-separated tag names")] = None,
) -> dict:
    """Upload a document into a report.

    Identical bytes already present in the report are rejected with 409
    E_DUPLICATE_DOCUMENT.
    """
    # At most cap+1 bytes; anything longer is reported as too large
    content = file.file.read(get_settings().max_upload_bytes + 1)
    result = documents_service.upload_document(
        db,
        viewer.user_id,
        report_id,
        content,
        file.filename or "",
        content_type=file.content_type,
        tags=_split_tags(tags),
        storage_client=storage_client,
        parser=parser,
    )
    return success_response(result.model_dump(mode="json"))


@router.get("/reports/{report_id}/documents/search")
def search_documents(
    report_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    q: Annotated[str | None, Query(description="Search text")] = None,
) -> dict:
    """Search a report's documents by filename, notes or parsed text."""
    result = documents_service.search_documents(db, viewer.user_id, report_id, q)
    return success_response([d.model_dump(mode="json") for d in result])


# =============================================================================
# Document routes
# =============================================================================


@router.get("/documents/{document_id}")
def get_document(
    document_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = documents_service.get_document(db, viewer.user_id, document_id)
    return success_response(result.model_dump(mode="json"))


@router.patch("/documents/{document_id}")
def update_document(
    document_id: UUID,
    body: UpdateDocumentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update a document's filename and/or notes."""
    result = documents_service.update_document(
        db, viewer.user_id, document_id, filename=body.filename, notes=body.notes
    )
    return success_response(result.model_dump(mode="json"))


@router.delete("/documents/{document_id}", status_code=204)
def delete_document(
    document_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    storage_client: Annotated[StorageClientBase, Depends(get_storage)],
) -> Response:
    """Soft-delete a document and remove its stored file."""
    documents_service.delete_document(
        db, viewer.user_id, document_id, storage_client=storage_client
    )
    return Response(status_code=204)


@router.get("/documents/{document_id}/content")
def get_document_content(
    document_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    storage_client: Annotated[StorageClientBase, Depends(get_storage)],
) -> Response:
    """Download a document's original bytes."""
    result = documents_service.read_document_content(
        db, viewer.user_id, document_id, storage_client=storage_client
    )
    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}"
        },
    )

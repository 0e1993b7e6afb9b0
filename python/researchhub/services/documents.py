"""Document service layer.

Handles document upload with content-hash deduplication, plus read, update,
delete and search of documents inside a report.

Upload flow:
1. Authorize the viewer against the parent report
2. Validate filename, size and tags
3. Hash the bytes (SHA-256) and reject a duplicate within the report
4. Store bytes at a content-addressed path
5. Extract text (failures degrade to no parsed content)
6. Re-check the report, insert the row in a savepoint and attach tags; a
   unique-index violation from a concurrent identical upload becomes
   DuplicateDocumentError

Steps 1-3 and step 6 run in two short transactions. Storage and parsing
happen between them with no transaction open, and bytes that end up
unreferenced after a failed step 6 are removed.
"""

import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from researchhub.config import get_settings
from researchhub.db.models import Document, utcnow
from researchhub.db.session import transaction
from researchhub.errors import (
    ApiError,
    ApiErrorCode,
    DuplicateDocumentError,
    InvalidRequestError,
)
from researchhub.logging import get_logger
from researchhub.parser import ParserClient, ParserError, get_parser_client
from researchhub.repositories import DocumentRepository
from researchhub.schemas.document import DocumentOut
from researchhub.services.access import load_document_for_owner, load_report_for_owner
from researchhub.services.reports import validate_search_query
from researchhub.services.tags import apply_document_tags, normalize_tag_name
from researchhub.storage import StorageClientBase, StorageError, compute_sha256, get_storage_client

logger = get_logger(__name__)

MAX_FILENAME_LENGTH = 255
DEFAULT_MIME_TYPE = "application/octet-stream"

# Content types browsers send when they don't know better
GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})


@dataclass(frozen=True)
class DocumentContent:
    """Raw bytes of a stored document, ready to stream to the client."""

    data: bytes
    mime_type: str
    filename: str


def clean_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe basename.

    Raises:
        InvalidRequestError: If nothing usable remains.
    """
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    if not name or name in (".", "..") or len(name) > MAX_FILENAME_LENGTH:
        raise InvalidRequestError(
            ApiErrorCode.E_FILENAME_INVALID,
            f"Filename must be 1-{MAX_FILENAME_LENGTH} characters",
        )
    return name


def resolve_mime_type(filename: str, content_type: str | None = None) -> str:
    """Pick the stored MIME type.

    An explicit, non-generic content type wins; otherwise guess from the
    filename; otherwise fall back to application/octet-stream.
    """
    if content_type:
        declared = content_type.split(";", 1)[0].strip().lower()
        if declared not in GENERIC_MIME_TYPES:
            return declared

    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


def _extract_text(
    parser: ParserClient, content: bytes, filename: str, mime_type: str
) -> str | None:
    try:
        text = parser.parse(content, filename, mime_type)
    except ParserError as e:
        logger.warning("document_parse_failed", filename=filename, error=e.message, code=e.code)
        return None
    return text or None


def _discard_if_unreferenced(
    db: Session, storage_client: StorageClientBase, storage_path: str
) -> None:
    """Remove stored bytes unless a non-deleted document still points at them.

    Keys are content-addressed, so a re-upload of the same bytes may already
    be using the object.
    """
    with transaction(db):
        in_use = DocumentRepository(db).storage_path_in_use(storage_path)
    if in_use:
        return
    storage_client.delete_file(storage_path)
    logger.info("document_file_removed", storage_path=storage_path)


def upload_document(
    db: Session,
    viewer_id: UUID,
    report_id: UUID,
    content: bytes,
    filename: str,
    content_type: str | None = None,
    tags: Iterable[str] = (),
    *,
    storage_client: StorageClientBase | None = None,
    parser: ParserClient | None = None,
) -> DocumentOut:
    """Upload a document into a report.

    Args:
        db: Database session.
        viewer_id: The ID of the uploading user.
        report_id: Target report.
        content: File bytes.
        filename: Original filename (path components are stripped).
        content_type: Client-declared MIME type, if any.
        tags: Tag names to attach.
        storage_client: Storage backend (defaults to configured storage).
        parser: Text extraction client (defaults to configured parser).

    Returns:
        The created document.

    Raises:
        NotFoundError: If the report is missing or deleted.
        ForbiddenError: If the viewer does not own the report.
        InvalidRequestError: If filename, content or tags are invalid.
        DuplicateDocumentError: If the report already holds these bytes.
        ApiError(E_STORAGE_ERROR): If the bytes cannot be stored.
    """
    storage_client = storage_client or get_storage_client()
    parser = parser or get_parser_client()
    max_bytes = get_settings().max_upload_bytes

    repo = DocumentRepository(db)

    # Checks only; the transaction is closed again before storage and parsing
    with transaction(db):
        report = load_report_for_owner(db, viewer_id, report_id)

        filename = clean_filename(filename)
        if not content:
            raise InvalidRequestError(ApiErrorCode.E_EMPTY_FILE, "File is empty")
        if len(content) > max_bytes:
            raise InvalidRequestError(
                ApiErrorCode.E_FILE_TOO_LARGE,
                f"File exceeds maximum size of {max_bytes} bytes",
            )
        tag_names = [normalize_tag_name(t) for t in tags]

        file_hash = compute_sha256(content)
        if repo.find_by_hash(report.id, file_hash) is not None:
            logger.info(
                "document_duplicate_rejected", report_id=str(report.id), file_hash=file_hash
            )
            raise DuplicateDocumentError()

    try:
        storage_path = storage_client.save_file(report.id, file_hash, content, filename)
    except StorageError as e:
        logger.error("document_store_failed", report_id=str(report.id), error=e.message)
        raise ApiError(ApiErrorCode.E_STORAGE_ERROR, "Failed to store file") from e

    mime_type = resolve_mime_type(filename, content_type)
    parsed_content = _extract_text(parser, content, filename, mime_type)

    try:
        with transaction(db):
            # The report may have been deleted while parsing ran
            report = load_report_for_owner(db, viewer_id, report_id)
            document = Document(
                report_id=report.id,
                filename=filename,
                file_hash=file_hash,
                storage_path=storage_path,
                size_bytes=len(content),
                mime_type=mime_type,
                parsed_content=parsed_content,
                notes="",
            )
            try:
                with db.begin_nested():
                    repo.save(document)
            except IntegrityError:
                logger.info(
                    "document_duplicate_rejected",
                    report_id=str(report.id),
                    file_hash=file_hash,
                    race=True,
                )
                raise DuplicateDocumentError() from None

            if tag_names:
                apply_document_tags(document, tag_names)
                db.flush()
    except Exception:
        _discard_if_unreferenced(db, storage_client, storage_path)
        raise

    logger.info(
        "document_uploaded",
        document_id=str(document.id),
        report_id=str(report.id),
        size_bytes=document.size_bytes,
        mime_type=mime_type,
        parsed=parsed_content is not None,
    )
    return DocumentOut.model_validate(document)


def get_document(db: Session, viewer_id: UUID, document_id: UUID) -> DocumentOut:
    """Get a single document.

    Raises:
        NotFoundError: If the document or its report is missing or deleted.
        ForbiddenError: If the viewer does not own the report.
    """
    return DocumentOut.model_validate(load_document_for_owner(db, viewer_id, document_id))


def list_documents(db: Session, viewer_id: UUID, report_id: UUID) -> list[DocumentOut]:
    """List a report's active documents, newest first."""
    report = load_report_for_owner(db, viewer_id, report_id)
    documents = DocumentRepository(db).find_by_report_id(report.id)
    return [DocumentOut.model_validate(d) for d in documents]


def update_document(
    db: Session,
    viewer_id: UUID,
    document_id: UUID,
    filename: str | None = None,
    notes: str | None = None,
) -> DocumentOut:
    """Update a document's filename and/or notes.

    Raises:
        InvalidRequestError: If no field is given or the filename is invalid.
        NotFoundError: If the document is missing or deleted.
        ForbiddenError: If the viewer does not own the report.
    """
    if filename is None and notes is None:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST, "At least one of filename or notes is required"
        )
    if filename is not None:
        filename = clean_filename(filename)

    with transaction(db):
        document = load_document_for_owner(db, viewer_id, document_id)
        if filename is not None:
            document.filename = filename
        if notes is not None:
            document.notes = notes
        document.updated_at = utcnow()
        DocumentRepository(db).save(document)

    return DocumentOut.model_validate(document)


def delete_document(
    db: Session,
    viewer_id: UUID,
    document_id: UUID,
    *,
    storage_client: StorageClientBase | None = None,
) -> None:
    """Soft-delete a document and remove its stored bytes.

    File removal is best-effort, happens after the row change commits, and
    is skipped while another active document uses the same stored object.

    Raises:
        NotFoundError: If the document is missing or already deleted.
        ForbiddenError: If the viewer does not own the report.
    """
    storage_client = storage_client or get_storage_client()

    with transaction(db):
        document = load_document_for_owner(db, viewer_id, document_id)
        storage_path = document.storage_path
        DocumentRepository(db).soft_delete(document.id)

    _discard_if_unreferenced(db, storage_client, storage_path)
    logger.info("document_deleted", document_id=str(document_id))


def search_documents(
    db: Session, viewer_id: UUID, report_id: UUID, query: str | None
) -> list[DocumentOut]:
    """Search a report's documents by filename, notes or parsed text.

    Raises:
        InvalidRequestError: If the query is blank.
    """
    query = validate_search_query(query)
    report = load_report_for_owner(db, viewer_id, report_id)
    documents = DocumentRepository(db).search(report.id, query)
    return [DocumentOut.model_validate(d) for d in documents]


def read_document_content(
    db: Session,
    viewer_id: UUID,
    document_id: UUID,
    *,
    storage_client: StorageClientBase | None = None,
) -> DocumentContent:
    """Load a document's stored bytes for download.

    Raises:
        NotFoundError: If the document is missing or deleted.
        ForbiddenError: If the viewer does not own the report.
        ApiError(E_STORAGE_MISSING): If the bytes are gone from storage.
    """
    storage_client = storage_client or get_storage_client()
    document = load_document_for_owner(db, viewer_id, document_id)

    try:
        data = storage_client.get_file(document.storage_path)
    except StorageError as e:
        logger.error(
            "document_content_unavailable",
            document_id=str(document_id),
            code=e.code,
            error=e.message,
        )
        code = (
            ApiErrorCode.E_STORAGE_MISSING
            if e.code == ApiErrorCode.E_STORAGE_MISSING.value
            else ApiErrorCode.E_STORAGE_ERROR
        )
        raise ApiError(code, "Document content is unavailable") from e

    return DocumentContent(data=data, mime_type=document.mime_type, filename=document.filename)

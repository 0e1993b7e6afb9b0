"""Document repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from researchhub.db.models import Document, Report, utcnow
from researchhub.repositories._search import LIKE_ESCAPE, contains_pattern


class DocumentRepository:
    """Data access for Document rows.

    A document counts as active only when both it and its parent report are
    not soft-deleted; default reads join the report to enforce that.
    """

    def __init__(self, session: Session):
        self.session = session

    def _active(self, stmt):
        return stmt.join(Report, Document.report_id == Report.id).where(
            Document.deleted_at.is_(None),
            Report.deleted_at.is_(None),
        )

    def find_by_id(self, document_id: UUID, include_deleted: bool = False) -> Document | None:
        stmt = select(Document).where(Document.id == document_id)
        if not include_deleted:
            stmt = self._active(stmt)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_report_id(self, report_id: UUID, include_deleted: bool = False) -> list[Document]:
        """List a report's documents, newest first."""
        stmt = select(Document).where(Document.report_id == report_id)
        if not include_deleted:
            stmt = self._active(stmt)
        stmt = stmt.order_by(Document.created_at.desc(), Document.id.desc())
        return list(self.session.execute(stmt).scalars())

    def find_by_hash(self, report_id: UUID, file_hash: str) -> Document | None:
        """Find the active document in a report with the given content hash."""
        stmt = select(Document).where(
            Document.report_id == report_id,
            Document.file_hash == file_hash,
            Document.deleted_at.is_(None),
        )
        return self.session.execute(stmt).scalars().first()

    def storage_path_in_use(self, storage_path: str) -> bool:
        """Whether any non-deleted document still points at a stored object."""
        stmt = select(Document.id).where(
            Document.storage_path == storage_path,
            Document.deleted_at.is_(None),
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def save(self, document: Document) -> Document:
        """Insert or update a document and flush.

        Raises:
            IntegrityError: If an active document with the same hash already
                exists in the report.
        """
        self.session.add(document)
        self.session.flush()
        return document

    def soft_delete(self, document_id: UUID, at: datetime | None = None) -> bool:
        """Mark a document deleted. Returns False if missing or already deleted."""
        document = self.find_by_id(document_id)
        if document is None:
            return False

        now = at or utcnow()
        document.deleted_at = now
        document.updated_at = now
        self.session.flush()
        return True

    def search(self, report_id: UUID, query: str) -> list[Document]:
        """Case-insensitive substring search over filename, notes and parsed text."""
        pattern = contains_pattern(query)
        stmt = self._active(select(Document).where(Document.report_id == report_id)).where(
            or_(
                Document.filename.ilike(pattern, escape=LIKE_ESCAPE),
                Document.notes.ilike(pattern, escape=LIKE_ESCAPE),
                Document.parsed_content.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )
        stmt = stmt.order_by(Document.created_at.desc(), Document.id.desc())
        return list(self.session.execute(stmt).scalars())

"""Test data factories.

Centralizes helper functions that create database rows for tests.
Each factory knows the full schema requirements for its table,
so individual tests don't need to track NOT NULL constraints.

Factories commit, which only releases the test session's savepoint; the
outer connection transaction still rolls everything back after the test.
"""

from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from researchhub.db.models import Document, Report, User
from researchhub.storage import build_storage_path, compute_sha256
from tests.helpers import email_for


def create_test_user(session: Session, user_id: UUID | None = None, **fields) -> User:
    user_id = user_id or uuid4()
    user = User(id=user_id, email=fields.pop("email", email_for(user_id)), **fields)
    session.add(user)
    session.commit()
    return user


def create_test_report(
    session: Session, user_id: UUID, name: str = "Test Report", content: str = ""
) -> Report:
    report = Report(user_id=user_id, name=name, content=content)
    session.add(report)
    session.commit()
    return report


def create_test_document(
    session: Session,
    report_id: UUID,
    content: bytes | None = None,
    filename: str = "notes.txt",
    mime_type: str = "text/plain",
    **fields,
) -> Document:
    """Create a document row (no bytes are written to storage)."""
    content = content if content is not None else uuid4().bytes
    file_hash = compute_sha256(content)
    document = Document(
        report_id=report_id,
        filename=filename,
        file_hash=file_hash,
        storage_path=build_storage_path(report_id, file_hash, filename),
        size_bytes=len(content),
        mime_type=mime_type,
        **fields,
    )
    session.add(document)
    session.commit()
    return document

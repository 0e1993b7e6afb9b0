"""Database schema tests.

Verifies connectivity and the constraints the services rely on.
"""

from uuid import uuid4

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from researchhub.db.models import Document, DocumentTag, ReportTag, utcnow
from tests.factories import create_test_document, create_test_report, create_test_user


class TestDatabaseConnectivity:
    def test_session_opens_and_executes_query(self, db_session: Session):
        """Database session can execute a simple query."""
        row = db_session.execute(text("SELECT 1 AS value")).fetchone()

        assert row is not None
        assert row[0] == 1

    def test_schema_has_all_tables(self, engine):
        tables = set(inspect(engine).get_table_names())

        assert {"users", "reports", "documents", "document_tags", "report_tags"} <= tables


class TestDocumentHashIndex:
    """One active document per (report, content hash)."""

    def test_second_active_row_rejected(self, db_session: Session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)
        create_test_document(db_session, report.id, content=b"same")

        with pytest.raises(IntegrityError):
            create_test_document(db_session, report.id, content=b"same")
        db_session.rollback()

    def test_deleted_row_does_not_block(self, db_session: Session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)
        create_test_document(db_session, report.id, content=b"same", deleted_at=utcnow())

        document = create_test_document(db_session, report.id, content=b"same")

        assert document.deleted_at is None

    def test_same_hash_in_different_reports(self, db_session: Session):
        user = create_test_user(db_session)
        first = create_test_report(db_session, user.id, name="A")
        second = create_test_report(db_session, user.id, name="B")

        a = create_test_document(db_session, first.id, content=b"shared")
        b = create_test_document(db_session, second.id, content=b"shared")

        assert a.file_hash == b.file_hash


class TestConstraints:
    def test_email_unique(self, db_session: Session):
        create_test_user(db_session, email="dup@example.test")

        with pytest.raises(IntegrityError):
            create_test_user(db_session, email="dup@example.test")
        db_session.rollback()

    def test_document_tag_name_unique_per_document(self, db_session: Session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)
        document = create_test_document(db_session, report.id)
        db_session.add(DocumentTag(document_id=document.id, name="x"))
        db_session.commit()

        db_session.add(DocumentTag(document_id=document.id, name="x"))
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

    def test_tag_defaults(self, db_session: Session):
        user = create_test_user(db_session)
        report = create_test_report(db_session, user.id)
        tag = ReportTag(report_id=report.id, name="y")
        db_session.add(tag)
        db_session.flush()

        assert tag.color == "#6b7280"
        assert tag.created_at is not None

    def test_document_requires_existing_report(self, db_session: Session):
        db_session.add(
            Document(
                report_id=uuid4(),
                filename="orphan.txt",
                file_hash="h",
                storage_path="x/h.txt",
                size_bytes=1,
                mime_type="text/plain",
            )
        )
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

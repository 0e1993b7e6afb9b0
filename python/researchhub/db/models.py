"""SQLAlchemy ORM models for ResearchHub.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Column types are dialect-neutral so the schema can be created on PostgreSQL
(production, via Alembic) and on SQLite (fast local test runs).

Soft delete:
    Report and Document carry a nullable deleted_at. Rows are never removed by
    the service layer; every default read path filters deleted_at IS NULL.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_TAG_COLOR = "#6b7280"


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Models
# =============================================================================


class User(Base):
    """User account model.

    The user ID matches the identity provider's subject claim.
    email and provider are set on first sign-in and never change afterwards.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    provider: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    reports: Mapped[list["Report"]] = relationship(
        "Report", back_populates="owner", cascade="all, delete-orphan"
    )


class Report(Base):
    """Report model - a user-owned container of markdown content and documents."""

    __tablename__ = "reports"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", server_default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "length(name) BETWEEN 1 AND 200",
            name="ck_reports_name_length",
        ),
        Index("ix_reports_user_id_created_at", "user_id", "created_at"),
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="reports")
    documents: Mapped[list["Document"]] = relationship(
        "Document", back_populates="report", cascade="all, delete-orphan"
    )
    tags: Mapped[list["ReportTag"]] = relationship(
        "ReportTag",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportTag.name",
    )


class Document(Base):
    """Document model - a file attached to exactly one report.

    File bytes live in storage at storage_path; the row holds metadata and the
    parsed text. Within a report, at most one active row may carry a given
    file_hash (partial unique index below).
    """

    __tablename__ = "documents"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    report_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    file_hash: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str] = mapped_column(Text, nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str] = mapped_column(Text, nullable=False)
    parsed_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="", server_default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("size_bytes >= 0", name="ck_documents_size_nonnegative"),
        Index("ix_documents_report_id", "report_id"),
        Index(
            "uq_documents_report_hash_active",
            "report_id",
            "file_hash",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    # Relationships
    report: Mapped["Report"] = relationship("Report", back_populates="documents")
    tags: Mapped[list["DocumentTag"]] = relationship(
        "DocumentTag",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentTag.name",
    )


class DocumentTag(Base):
    """Label attached to a document. Names are unique per document."""

    __tablename__ = "document_tags"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    document_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str] = mapped_column(
        Text, default=DEFAULT_TAG_COLOR, server_default=DEFAULT_TAG_COLOR, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("document_id", "name", name="uq_document_tags_document_name"),
        Index("ix_document_tags_document_id", "document_id"),
    )

    document: Mapped["Document"] = relationship("Document", back_populates="tags")


class ReportTag(Base):
    """Label attached to a report. Names are unique per report."""

    __tablename__ = "report_tags"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    report_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str] = mapped_column(
        Text, default=DEFAULT_TAG_COLOR, server_default=DEFAULT_TAG_COLOR, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("report_id", "name", name="uq_report_tags_report_name"),
        Index("ix_report_tags_report_id", "report_id"),
    )

    report: Mapped["Report"] = relationship("Report", back_populates="tags")

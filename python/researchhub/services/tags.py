"""Tag service layer.

Documents and reports carry named, colored labels. Rules for both:
- Names are trimmed and must be 1-50 characters
- Colors are #RRGGBB hex; omitted colors default to gray
- Names are unique per parent; adding an existing name updates its color
"""

import re
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from researchhub.db.models import DEFAULT_TAG_COLOR, Document, DocumentTag, ReportTag
from researchhub.db.session import transaction
from researchhub.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from researchhub.schemas.tag import TagOut
from researchhub.services.access import load_document_for_owner, load_report_for_owner

MAX_TAG_NAME_LENGTH = 50
COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def normalize_tag_name(name: str) -> str:
    name = name.strip()
    if not name or len(name) > MAX_TAG_NAME_LENGTH:
        raise InvalidRequestError(
            ApiErrorCode.E_TAG_INVALID,
            f"Tag name must be 1-{MAX_TAG_NAME_LENGTH} characters",
        )
    return name


def normalize_color(color: str | None) -> str | None:
    if color is None:
        return None
    color = color.strip()
    if not COLOR_PATTERN.match(color):
        raise InvalidRequestError(ApiErrorCode.E_TAG_INVALID, "Color must be a #RRGGBB hex value")
    return color.lower()


def _upsert(tags: list, tag_cls: type, name: str, color: str | None):
    """Add a tag to a parent's collection, or recolor the existing one."""
    for tag in tags:
        if tag.name == name:
            if color is not None:
                tag.color = color
            return tag

    tag = tag_cls(name=name, color=color or DEFAULT_TAG_COLOR)
    tags.append(tag)
    return tag


def _add_tag(db: Session, parent, tag_cls: type, name: str, color: str | None):
    """Upsert a tag on a persisted parent and flush it under a savepoint.

    A concurrent request may commit the same name after parent.tags was
    loaded; the unique index then rejects the insert, and the reloaded
    collection holds the winner, which is recolored instead.
    """
    try:
        with db.begin_nested():
            tag = _upsert(parent.tags, tag_cls, name, color)
            db.flush()
    except IntegrityError:
        db.expire(parent, ["tags"])
        tag = _upsert(parent.tags, tag_cls, name, color)
        db.flush()
    return tag


def _remove(tags: list, name: str) -> None:
    name = name.strip()
    for tag in tags:
        if tag.name == name:
            tags.remove(tag)
            return
    raise NotFoundError(ApiErrorCode.E_TAG_NOT_FOUND, "Tag not found")


def apply_document_tags(document: Document, names: Iterable[str]) -> None:
    """Attach tags (default color) to a document without committing.

    Used by the upload flow so tags land in the same transaction as the row.
    """
    for name in names:
        _upsert(document.tags, DocumentTag, normalize_tag_name(name), None)


# =============================================================================
# Document tags
# =============================================================================


def list_document_tags(db: Session, viewer_id: UUID, document_id: UUID) -> list[TagOut]:
    document = load_document_for_owner(db, viewer_id, document_id)
    return sorted((TagOut.model_validate(t) for t in document.tags), key=lambda t: t.name)


def add_document_tag(
    db: Session,
    viewer_id: UUID,
    document_id: UUID,
    name: str,
    color: str | None = None,
) -> TagOut:
    """Add a tag to a document, or update the color of an existing one.

    Raises:
        InvalidRequestError: If the name or color is invalid.
        NotFoundError: If the document is missing or deleted.
        ForbiddenError: If the viewer does not own the document's report.
    """
    name = normalize_tag_name(name)
    color = normalize_color(color)

    with transaction(db):
        document = load_document_for_owner(db, viewer_id, document_id)
        tag = _add_tag(db, document, DocumentTag, name, color)

    return TagOut.model_validate(tag)


def remove_document_tag(db: Session, viewer_id: UUID, document_id: UUID, name: str) -> None:
    """Remove a tag from a document.

    Raises:
        NotFoundError: If the document or the tag does not exist.
    """
    with transaction(db):
        document = load_document_for_owner(db, viewer_id, document_id)
        _remove(document.tags, name)


# =============================================================================
# Report tags
# =============================================================================


def list_report_tags(db: Session, viewer_id: UUID, report_id: UUID) -> list[TagOut]:
    report = load_report_for_owner(db, viewer_id, report_id)
    return sorted((TagOut.model_validate(t) for t in report.tags), key=lambda t: t.name)


def add_report_tag(
    db: Session,
    viewer_id: UUID,
    report_id: UUID,
    name: str,
    color: str | None = None,
) -> TagOut:
    """Add a tag to a report, or update the color of an existing one."""
    name = normalize_tag_name(name)
    color = normalize_color(color)

    with transaction(db):
        report = load_report_for_owner(db, viewer_id, report_id)
        tag = _add_tag(db, report, ReportTag, name, color)

    return TagOut.model_validate(tag)


def remove_report_tag(db: Session, viewer_id: UUID, report_id: UUID, name: str) -> None:
    """Remove a tag from a report."""
    with transaction(db):
        report = load_report_for_owner(db, viewer_id, report_id)
        _remove(report.tags, name)

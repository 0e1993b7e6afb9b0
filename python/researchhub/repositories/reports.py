"""Report repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from researchhub.db.models import Report, utcnow
from researchhub.repositories._search import LIKE_ESCAPE, contains_pattern


class ReportRepository:
    """Data access for Report rows."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, report_id: UUID, include_deleted: bool = False) -> Report | None:
        stmt = select(Report).where(Report.id == report_id)
        if not include_deleted:
            stmt = stmt.where(Report.deleted_at.is_(None))
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_user_id(self, user_id: UUID, include_deleted: bool = False) -> list[Report]:
        """List a user's reports, newest first."""
        stmt = select(Report).where(Report.user_id == user_id)
        if not include_deleted:
            stmt = stmt.where(Report.deleted_at.is_(None))
        stmt = stmt.order_by(Report.created_at.desc(), Report.id.desc())
        return list(self.session.execute(stmt).scalars())

    def save(self, report: Report) -> Report:
        """Insert or update a report and flush so generated fields are populated."""
        self.session.add(report)
        self.session.flush()
        return report

    def soft_delete(self, report_id: UUID, at: datetime | None = None) -> bool:
        """Mark a report deleted.

        Returns:
            True if an active report was marked, False if it was missing or
            already deleted.
        """
        report = self.find_by_id(report_id)
        if report is None:
            return False

        now = at or utcnow()
        report.deleted_at = now
        report.updated_at = now
        self.session.flush()
        return True

    def search(self, user_id: UUID, query: str) -> list[Report]:
        """Case-insensitive substring search over name and content."""
        pattern = contains_pattern(query)
        stmt = (
            select(Report)
            .where(
                Report.user_id == user_id,
                Report.deleted_at.is_(None),
                or_(
                    Report.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Report.content.ilike(pattern, escape=LIKE_ESCAPE),
                ),
            )
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list(self.session.execute(stmt).scalars())

"""Data-access repositories.

Each repository wraps an explicit SQLAlchemy Session and translates between
ORM rows and the queries the services need. Repositories never commit;
transaction boundaries belong to the service layer.

Default read paths exclude soft-deleted rows. Pass include_deleted=True to
see them.
"""

from researchhub.repositories.documents import DocumentRepository
from researchhub.repositories.reports import ReportRepository
from researchhub.repositories.users import UserRepository

__all__ = [
    "DocumentRepository",
    "ReportRepository",
    "UserRepository",
]

"""Database module for ResearchHub.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from researchhub.db.engine import create_db_engine, get_engine
from researchhub.db.models import (
    DEFAULT_TAG_COLOR,
    Base,
    Document,
    DocumentTag,
    Report,
    ReportTag,
    User,
)
from researchhub.db.session import get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    # Base
    "Base",
    "DEFAULT_TAG_COLOR",
    # Models
    "User",
    "Report",
    "Document",
    "DocumentTag",
    "ReportTag",
]

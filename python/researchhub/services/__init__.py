"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and orchestrate database operations.
"""

from researchhub.services.documents import upload_document
from researchhub.services.reports import create_report, get_report, list_reports
from researchhub.services.users import ensure_user

__all__ = [
    "create_report",
    "ensure_user",
    "get_report",
    "list_reports",
    "upload_document",
]

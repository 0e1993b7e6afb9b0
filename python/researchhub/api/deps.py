"""FastAPI dependencies for route handlers.

Common dependencies like database sessions, storage and parsing clients.
Clients are created once in create_app() and kept on app.state.
"""

from fastapi import Request

from researchhub.db.session import get_db
from researchhub.parser import ParserClient
from researchhub.storage import StorageClientBase

__all__ = ["get_db", "get_parser", "get_storage"]


def get_storage(request: Request) -> StorageClientBase:
    """Get the shared storage client from app state."""
    return request.app.state.storage_client


def get_parser(request: Request) -> ParserClient:
    """Get the shared parser client from app state."""
    return request.app.state.parser_client

"""Authentication and authorization module.

This module provides:
- Token verification (shared-secret HS256 verifier)
- Auth middleware for FastAPI
- Request state with viewer identity
"""

from researchhub.auth.middleware import AuthMiddleware, Viewer, get_viewer
from researchhub.auth.verifier import SharedSecretVerifier, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_viewer",
    "SharedSecretVerifier",
    "TokenVerifier",
]

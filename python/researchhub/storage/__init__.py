"""Storage module for uploaded document bytes.

Provides:
- StorageClientBase with a local-filesystem implementation
- FakeStorageClient for tests
- Path building utilities for consistent storage keys
"""

from researchhub.storage.client import (
    FakeStorageClient,
    LocalStorageClient,
    StorageClientBase,
    StorageError,
    compute_sha256,
    get_storage_client,
)
from researchhub.storage.paths import build_storage_path, get_file_extension

__all__ = [
    "StorageClientBase",
    "LocalStorageClient",
    "FakeStorageClient",
    "StorageError",
    "compute_sha256",
    "get_storage_client",
    "build_storage_path",
    "get_file_extension",
]

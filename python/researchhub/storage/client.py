"""Document byte storage.

LocalStorageClient writes under STORAGE_PATH; FakeStorageClient keeps bytes in
memory for tests. Deletion is best-effort on both.

Keys are relative ("{report_id}/{hash}{ext}"); each client resolves them
against its own root. Callers never build keys by hand.
"""

import hashlib
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO
from uuid import UUID

from researchhub.config import get_settings
from researchhub.logging import get_logger
from researchhub.storage.paths import build_storage_path

logger = get_logger(__name__)

CHUNK_SIZE = 8 * 1024 * 1024  # 8 MiB


class StorageError(Exception):
    """Storage operation error."""

    def __init__(self, message: str, code: str = "E_STORAGE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class StorageClientBase(ABC):
    """Abstract base class for storage client implementations."""

    def save_file(
        self,
        report_id: UUID | str,
        file_hash: str,
        content: bytes,
        filename: str,
    ) -> str:
        """Store document bytes and return the storage key.

        Writing the same bytes twice is idempotent: the key is derived from
        the content hash.

        Raises:
            StorageError: If the write fails.
        """
        path = build_storage_path(report_id, file_hash, filename)
        self.put_object(path, content)
        return path

    @abstractmethod
    def put_object(self, path: str, content: bytes) -> None:
        """Write bytes at a storage key, replacing any existing object."""
        ...

    @abstractmethod
    def get_file(self, path: str) -> bytes:
        """Read an object's bytes.

        Raises:
            StorageError(E_STORAGE_MISSING): If the object doesn't exist.
        """
        ...

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Check whether an object exists."""
        ...

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Delete an object.

        Best-effort operation - a missing object is not an error, other
        failures are logged and swallowed.
        """
        ...


class LocalStorageClient(StorageClientBase):
    """Storage client backed by a local directory."""

    def __init__(self, base_path: str | os.PathLike[str]):
        self._base_path = Path(base_path).resolve()

    def _resolve(self, path: str) -> Path:
        """Resolve a key under the storage root, rejecting traversal."""
        full = (self._base_path / path.lstrip("/")).resolve()
        if not full.is_relative_to(self._base_path):
            raise StorageError(f"Path escapes storage root: {path}", code="E_STORAGE_ERROR")
        return full

    def put_object(self, path: str, content: bytes) -> None:
        full = self._resolve(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and rename so readers never see partial bytes
            fd, tmp_name = tempfile.mkstemp(dir=full.parent, prefix=".upload-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_name, full)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def get_file(self, path: str) -> bytes:
        full = self._resolve(path)
        try:
            return full.read_bytes()
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {path}", code="E_STORAGE_MISSING") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def file_exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except StorageError:
            return False

    def delete_file(self, path: str) -> None:
        try:
            self._resolve(path).unlink(missing_ok=True)
        except (OSError, StorageError) as e:
            logger.warning("storage_delete_failed", path=path, error=str(e))


class FakeStorageClient(StorageClientBase):
    """Fake storage client for testing without touching disk.

    Stores files in memory and provides deterministic behavior for unit tests.
    """

    def __init__(self):
        self._objects: dict[str, bytes] = {}

    def put_object(self, path: str, content: bytes) -> None:
        self._objects[path] = content

    def get_file(self, path: str) -> bytes:
        if path not in self._objects:
            raise StorageError(f"Object not found: {path}", code="E_STORAGE_MISSING")
        return self._objects[path]

    def file_exists(self, path: str) -> bool:
        return path in self._objects

    def delete_file(self, path: str) -> None:
        self._objects.pop(path, None)

    # Test helper methods

    def list_paths(self) -> list[str]:
        """All stored keys, sorted (test helper)."""
        return sorted(self._objects)

    def clear(self) -> None:
        """Clear all stored objects (test helper)."""
        self._objects.clear()


def get_storage_client() -> StorageClientBase:
    """Get the configured storage client.

    Returns:
        LocalStorageClient rooted at STORAGE_PATH.
    """
    return LocalStorageClient(get_settings().storage_path)


def compute_sha256(data: bytes | BinaryIO | Iterator[bytes]) -> str:
    """Compute SHA-256 hash of data.

    Args:
        data: Bytes, file-like object, or iterator of bytes.

    Returns:
        Hex-encoded SHA-256 hash.
    """
    hasher = hashlib.sha256()

    if isinstance(data, bytes):
        hasher.update(data)
    elif hasattr(data, "read"):
        while chunk := data.read(CHUNK_SIZE):
            hasher.update(chunk)
    else:
        for chunk in data:
            hasher.update(chunk)

    return hasher.hexdigest()

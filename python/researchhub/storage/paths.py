"""Storage path building utilities.

This module provides the single point of logic for building storage keys.
All key construction must go through build_storage_path() so the layout stays
consistent between upload, download and cleanup.

Path Invariant:
    {report_id}/{file_hash}{ext}

Rules:
    - No leading slash; keys are relative to the storage root
    - Content-addressed: identical bytes in one report map to one key
    - Extension comes from the original filename, lowercased, or is empty
"""

import os
import re
from uuid import UUID

# Extensions are kept only if they look like a normal file suffix.
_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,16}$")


def get_file_extension(filename: str) -> str:
    """Get the normalized extension for a filename.

    Args:
        filename: Original filename.

    Returns:
        Lowercase extension including the leading dot, or "" if the filename
        has no usable extension.
    """
    _, ext = os.path.splitext(filename)
    ext = ext.lower()
    if not _SAFE_EXTENSION.match(ext):
        return ""
    return ext


def build_storage_path(report_id: UUID | str, file_hash: str, filename: str) -> str:
    """Build the storage key for a document's bytes.

    Example:
        >>> build_storage_path(report_id, "ab12...", "Q4 Earnings.PDF")
        '3f0c.../ab12....pdf'
    """
    return f"{report_id}/{file_hash}{get_file_extension(filename)}"

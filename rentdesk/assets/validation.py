"""Size and MIME type checks for candidate files."""

from __future__ import annotations

from collections.abc import Iterable

from rentdesk.assets.types import AssetFile

BYTES_PER_MB = 1024 * 1024


def validate_size(file: AssetFile, max_size_mb: float) -> bool:
    """Return True if the file is at most ``max_size_mb`` mebibytes."""
    return file.size <= max_size_mb * BYTES_PER_MB


def validate_type(file: AssetFile, allowed_types: Iterable[str]) -> bool:
    """Return True if the file's content type matches an allowed entry.

    Entries ending in ``/*`` match on the major type only.
    """
    content_type = (file.content_type or "").strip().lower()
    major = content_type.split("/", 1)[0]

    for allowed in allowed_types:
        allowed = allowed.strip().lower()
        if allowed.endswith("/*"):
            if major and major == allowed[:-2]:
                return True
        elif content_type == allowed:
            return True
    return False


def size_error(max_size_mb: float) -> str:
    return f"File size must be {max_size_mb:g}MB or smaller."


def type_error(allowed_types: Iterable[str]) -> str:
    """Describe the accepted types, e.g. ``Only jpeg, png, webp files can be uploaded.``"""
    labels = []
    for allowed in allowed_types:
        if allowed.endswith("/*"):
            labels.append(allowed[:-2])
        else:
            labels.append(allowed.split("/", 1)[-1])
    if not labels:
        return "No file types are accepted for this upload."
    return f"Only {', '.join(labels)} files can be uploaded."

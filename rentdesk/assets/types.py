"""Value types passed in and out of the asset lifecycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from rentdesk.lib.storage.base import Bucket

DEFAULT_MAX_SIZE_MB = 10
DEFAULT_ALLOWED_TYPES = ("image/*", "application/pdf")


@dataclass(frozen=True)
class AssetFile:
    """A candidate file held in memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadOptions:
    """Per-call upload policy.

    ``allowed_types`` entries are exact MIME types or ``"<major>/*"``
    wildcards. An empty tuple allows nothing.
    """

    bucket: Bucket
    folder: str = ""
    max_size_mb: float = DEFAULT_MAX_SIZE_MB
    allowed_types: tuple[str, ...] = DEFAULT_ALLOWED_TYPES


@dataclass(frozen=True)
class UploadResult:
    success: bool
    url: str | None = None
    path: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, url: str, path: str) -> UploadResult:
        return cls(success=True, url=url, path=path)

    @classmethod
    def failed(cls, error: str) -> UploadResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DeleteResult:
    success: bool
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

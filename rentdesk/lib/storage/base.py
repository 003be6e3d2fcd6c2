"""Object store protocol and common types."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class Bucket(str, Enum):
    """Logical buckets, one per asset category."""

    VEHICLE_IMAGES = "vehicle-images"
    CAMPAIGN_IMAGES = "campaign-images"
    DOCUMENTS = "documents"


class StoreError(Exception):
    """Raised when the object store rejects or fails an operation."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ObjectStore(Protocol):
    """Interface for object store backends."""

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """Store data under the given key. Never overwrites an existing key."""
        ...

    async def remove(self, bucket: str, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""
        ...

    def public_url(self, bucket: str, key: str) -> str:
        """Return the public URL for the key."""
        ...

    async def close(self) -> None:
        """Release resources held by the backend."""
        ...

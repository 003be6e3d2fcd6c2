"""Shared pytest fixtures."""

import pytest

from rentdesk.assets.lifecycle import AssetLifecycle
from rentdesk.assets.types import AssetFile
from rentdesk.assets.urls import public_url
from rentdesk.lib.storage.base import StoreError

STORE_ORIGIN = "https://project.supabase.co"


class FakeObjectStore:
    """In-memory object store that records calls and can be told to fail."""

    def __init__(self, origin: str = STORE_ORIGIN) -> None:
        self.origin = origin
        self.objects: dict[tuple[str, str], bytes] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_put: Exception | None = None
        self.fail_remove: Exception | None = None
        self.closed = False

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        self.calls.append(("put", bucket, key))
        if self.fail_put is not None:
            raise self.fail_put
        if (bucket, key) in self.objects:
            raise StoreError("The resource already exists", status_code=409)
        self.objects[(bucket, key)] = data

    async def remove(self, bucket: str, key: str) -> None:
        self.calls.append(("remove", bucket, key))
        if self.fail_remove is not None:
            raise self.fail_remove
        self.objects.pop((bucket, key), None)

    def public_url(self, bucket: str, key: str) -> str:
        return public_url(self.origin, bucket, key)

    async def close(self) -> None:
        self.closed = True

    def removed(self) -> list[tuple[str, str]]:
        return [(bucket, key) for op, bucket, key in self.calls if op == "remove"]


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def lifecycle(store):
    return AssetLifecycle(store)


@pytest.fixture
def make_file():
    """Factory for in-memory files of a given size and type."""
    def _make(filename="photo.jpg", content_type="image/jpeg", size=1024):
        return AssetFile(filename=filename, content_type=content_type, data=b"\0" * size)
    return _make

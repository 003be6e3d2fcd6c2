"""Object store backends for asset files."""

from rentdesk.lib.storage.base import Bucket, ObjectStore, StoreError
from rentdesk.lib.storage.local import LocalStorageBackend
from rentdesk.lib.storage.factory import create_storage_backend

__all__ = ["Bucket", "LocalStorageBackend", "ObjectStore", "StoreError", "create_storage_backend"]

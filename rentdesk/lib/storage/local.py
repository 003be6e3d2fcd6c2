"""Local filesystem storage backend."""

from __future__ import annotations

import asyncio
from pathlib import Path

from rentdesk.assets.urls import public_url
from rentdesk.lib.storage.base import StoreError


class LocalStorageBackend:
    """Store objects on the local filesystem under ``<base_path>/<bucket>/<key>``.

    Public URLs use the same shape as the hosted platform so stored URLs stay
    resolvable when switching backends.
    """

    def __init__(self, base_path: Path, public_origin: str) -> None:
        self._base_path = base_path
        self._public_origin = public_origin

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        path = self._key_to_path(bucket, key)
        try:
            await asyncio.to_thread(self._write_new_file, path, data)
        except FileExistsError as exc:
            raise StoreError(f"The resource already exists: {bucket}/{key}", status_code=409) from exc
        except OSError as exc:
            raise StoreError(f"Could not write {bucket}/{key}: {exc}") from exc

    async def remove(self, bucket: str, key: str) -> None:
        path = self._key_to_path(bucket, key)
        try:
            await asyncio.to_thread(self._unlink, path)
        except OSError as exc:
            raise StoreError(f"Could not remove {bucket}/{key}: {exc}") from exc

    def public_url(self, bucket: str, key: str) -> str:
        return public_url(self._public_origin, bucket, key)

    async def close(self) -> None:
        """No persistent resources to clean up."""

    # -- internal helpers --

    def _key_to_path(self, bucket: str, key: str) -> Path:
        base = (self._base_path / bucket).resolve()
        path = (base / key).resolve()
        if not path.is_relative_to(base) or path == base:
            raise StoreError(f"Invalid key: {key!r}", status_code=400)
        return path

    @staticmethod
    def _write_new_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "xb") as f:
            f.write(data)

    @staticmethod
    def _unlink(path: Path) -> None:
        path.unlink(missing_ok=True)

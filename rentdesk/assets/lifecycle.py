"""Upload, replace, and delete asset files held in the object store.

Records keep only the public URL of their file, so every operation here is
driven by that URL and by the per-call ``UploadOptions``. Nothing is tracked
between calls.

Storage and the database can fail independently and there is no transaction
spanning both. The ordering rules are:

* ``upload`` validates before touching the store, so a rejected file leaves
  no partial state.
* ``replace`` commits the new object before removing the old one. A failed
  upload leaves the old object alone; a failed removal is logged and the
  replace still succeeds, leaving an orphan rather than a broken reference.
* ``delete`` treats a URL that does not resolve to a key as nothing to do.

None of the operations raise; each returns a result with a message that can
be shown to the user as-is. Cancellation is the exception: it propagates, so
an abandoned caller never receives a late result.
"""

from __future__ import annotations

import logging

from rentdesk.assets.keys import InvalidPathError, build_path, generate_key
from rentdesk.assets.types import AssetFile, DeleteResult, UploadOptions, UploadResult
from rentdesk.assets.urls import resolve_key
from rentdesk.assets.validation import size_error, type_error, validate_size, validate_type
from rentdesk.lib import observability
from rentdesk.lib.storage.base import Bucket, ObjectStore, StoreError

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "The file could not be uploaded."
DELETE_FAILED = "The file could not be deleted."
INVALID_PATH = "The file cannot be stored at that location."
UNEXPECTED_ERROR = "An unexpected error occurred."


class AssetLifecycle:
    """Validate, name, and move asset files through the object store."""

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    @property
    def store(self) -> ObjectStore:
        return self._store

    async def upload(self, file: AssetFile, options: UploadOptions) -> UploadResult:
        """Validate and store a new file."""
        if not validate_size(file, options.max_size_mb):
            return UploadResult.failed(size_error(options.max_size_mb))

        if not validate_type(file, options.allowed_types):
            return UploadResult.failed(type_error(options.allowed_types))

        bucket = _bucket_name(options.bucket)
        try:
            path = build_path(options.folder, generate_key(file.filename))
        except InvalidPathError as exc:
            logger.error("Refusing upload to %s: %s", bucket, exc)
            return UploadResult.failed(INVALID_PATH)

        with observability.span("asset.upload", bucket=bucket, path=path, size=file.size):
            try:
                await self._store.put(bucket, path, file.data, file.content_type)
            except StoreError as exc:
                logger.error("Storage upload of %s/%s failed: %s", bucket, path, exc)
                return UploadResult.failed(UPLOAD_FAILED)
            except Exception:
                _log_unexpected("upload", bucket, path)
                return UploadResult.failed(UNEXPECTED_ERROR)

        return UploadResult.ok(url=self._store.public_url(bucket, path), path=path)

    async def replace(
        self,
        old_url: str | None,
        file: AssetFile,
        options: UploadOptions,
    ) -> UploadResult:
        """Upload ``file`` and then remove the object ``old_url`` points at."""
        result = await self.upload(file, options)
        if not result.success:
            return result

        bucket = _bucket_name(options.bucket)
        old_key = resolve_key(old_url, bucket)
        if old_key is None or old_key == result.path:
            return result

        with observability.span("asset.replace.cleanup", bucket=bucket, path=old_key):
            try:
                await self._store.remove(bucket, old_key)
            except Exception:
                # The record already points at the new URL; an orphan is the lesser defect.
                logger.warning(
                    "Could not remove replaced asset %s/%s; leaving it orphaned",
                    bucket,
                    old_key,
                    exc_info=True,
                )

        return result

    async def delete(self, bucket: Bucket | str, url: str | None) -> DeleteResult:
        """Remove the object ``url`` points at, if any."""
        bucket = _bucket_name(bucket)
        key = resolve_key(url, bucket)
        if key is None:
            return DeleteResult(success=True)

        with observability.span("asset.delete", bucket=bucket, path=key):
            try:
                await self._store.remove(bucket, key)
            except StoreError as exc:
                logger.error("Storage delete of %s/%s failed: %s", bucket, key, exc)
                return DeleteResult(success=False, error=DELETE_FAILED)
            except Exception:
                _log_unexpected("delete", bucket, key)
                return DeleteResult(success=False, error=UNEXPECTED_ERROR)

        return DeleteResult(success=True)


def _bucket_name(bucket: Bucket | str) -> str:
    return bucket.value if isinstance(bucket, Bucket) else bucket


def _log_unexpected(action: str, bucket: str, path: str) -> None:
    if not observability.exception(
        "Unexpected error during {action} of {bucket}/{path}", action=action, bucket=bucket, path=path
    ):
        logger.exception("Unexpected error during %s of %s/%s", action, bucket, path)

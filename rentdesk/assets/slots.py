"""Keep a record's single file reference in step with the object store.

A record (vehicle, campaign, document) holds one optional URL. These helpers
encode the order in which the store and the record are touched; the record
itself is written through callbacks because the relational store lives
elsewhere.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from rentdesk.assets.lifecycle import AssetLifecycle
from rentdesk.assets.types import AssetFile, DeleteResult, UploadOptions, UploadResult
from rentdesk.lib.storage.base import Bucket

logger = logging.getLogger(__name__)


async def attach_asset(
    lifecycle: AssetLifecycle,
    file: AssetFile,
    options: UploadOptions,
    persist: Callable[[str], Awaitable[None]],
    current_url: str | None = None,
) -> UploadResult:
    """Upload (or replace) the file, then hand the new URL to ``persist``.

    ``persist`` is only awaited once the object is stored. If it raises, the
    new object is left orphaned and the error propagates to the caller.
    """
    if current_url:
        result = await lifecycle.replace(current_url, file, options)
    else:
        result = await lifecycle.upload(file, options)

    if not result.success:
        return result

    try:
        await persist(result.url)
    except Exception:
        logger.warning("Saving %s to its record failed; the object is orphaned", result.url)
        raise
    return result


async def detach_asset(
    lifecycle: AssetLifecycle,
    bucket: Bucket | str,
    url: str | None,
    remove_record: Callable[[], Awaitable[None]],
) -> DeleteResult:
    """Delete the stored file first, then the record regardless of the outcome."""
    result = await lifecycle.delete(bucket, url)
    if not result.success:
        logger.warning("Deleting %s failed (%s); removing the record anyway", url, result.error)

    await remove_record()
    return result

"""ASGI middleware for serving objects held by the local storage backend."""

from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path

from litestar.types import ASGIApp, Receive, Scope, Send

from rentdesk.assets.urls import PUBLIC_PATH_PREFIX
from rentdesk.lib.storage.base import Bucket
from rentdesk.middleware.helpers import send_not_found

BUCKET_NAMES = frozenset(bucket.value for bucket in Bucket)


class StorageFilesMiddleware:
    """Serve ``/storage/v1/object/public/{bucket}/{key}`` from the local backend's directory.

    Mirrors the hosted platform's public URLs so records written against the
    local backend link to something that loads.
    """

    def __init__(self, app: ASGIApp, base_path: Path) -> None:
        self.app = app
        self._base_path = base_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope["path"].startswith(PUBLIC_PATH_PREFIX):
            await self.app(scope, receive, send)
            return

        rest = scope["path"][len(PUBLIC_PATH_PREFIX):]
        bucket, _, key = rest.partition("/")
        if bucket not in BUCKET_NAMES or not key:
            await send_not_found(send)
            return

        # Security: reject traversal and null bytes
        if ".." in key.split("/") or "\x00" in key:
            await send_not_found(send)
            return

        bucket_path = (self._base_path / bucket).resolve()
        try:
            resolved = (bucket_path / key).resolve()
        except (OSError, ValueError):
            await send_not_found(send)
            return

        if not resolved.is_relative_to(bucket_path) or not resolved.is_file():
            await send_not_found(send)
            return

        content = await asyncio.to_thread(resolved.read_bytes)
        media_type = mimetypes.guess_type(str(resolved))[0] or "application/octet-stream"

        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-type", media_type.encode()),
                (b"content-length", str(len(content)).encode()),
            ],
        })
        await send({"type": "http.response.body", "body": content})

"""Supabase Storage backend over its REST API."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from rentdesk.assets.urls import public_url
from rentdesk.lib.storage.base import StoreError

if TYPE_CHECKING:
    from rentdesk.config import SupabaseConfig


class SupabaseStorageBackend:
    """Store objects in Supabase Storage buckets.

    The backend owns one ``httpx.AsyncClient`` for its lifetime; pass a
    preconfigured client to share a connection pool or to test against a
    mock transport.
    """

    def __init__(self, config: SupabaseConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._origin = config.url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.service_key}",
            "apikey": self._config.service_key,
        }

    def _object_url(self, bucket: str, key: str = "") -> str:
        base = f"{self._origin}/storage/v1/object/{bucket}"
        if key:
            return f"{base}/{quote(key, safe='/')}"
        return base

    async def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        headers = {
            **self._headers(),
            "Content-Type": content_type,
            "cache-control": f"max-age={self._config.cache_control}",
            "x-upsert": "false",
        }
        response = await self._send("POST", self._object_url(bucket, key), headers=headers, content=data)
        _raise_for_error(response, f"upload {bucket}/{key}")

    async def remove(self, bucket: str, key: str) -> None:
        # Supabase answers 200 with an empty list when nothing matched.
        response = await self._send(
            "DELETE",
            self._object_url(bucket),
            headers=self._headers(),
            json={"prefixes": [key]},
        )
        _raise_for_error(response, f"remove {bucket}/{key}")

    def public_url(self, bucket: str, key: str) -> str:
        return public_url(self._origin, bucket, key)

    async def close(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {url} failed: {exc}") from exc


def _raise_for_error(response: httpx.Response, action: str) -> None:
    """Turn a non-2xx storage API response into a StoreError."""
    if response.is_success:
        return

    message = response.text
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or message

    raise StoreError(f"Could not {action}: {message}", status_code=response.status_code)

"""Public URL construction and key recovery.

Records only keep the public URL of an asset, never its key. The key is
recovered from the URL's fixed path shape, so ``resolve_key`` must remain the
exact inverse of ``public_url``. If the platform ever changes its public URL
convention, stored URLs stop resolving and their objects are no longer
cleaned up.
"""

from __future__ import annotations

from urllib.parse import quote, unquote, urlsplit

PUBLIC_PATH_PREFIX = "/storage/v1/object/public/"


def public_url(origin: str, bucket: str, key: str) -> str:
    """Build ``<origin>/storage/v1/object/public/<bucket>/<key>``."""
    return f"{origin.rstrip('/')}{PUBLIC_PATH_PREFIX}{bucket}/{quote(key, safe='/')}"


def resolve_key(url: str | None, bucket: str) -> str | None:
    """Return the key a public URL points at, or None if it is not one of ours."""
    if not url:
        return None
    try:
        path = urlsplit(url).path
    except ValueError:
        return None

    marker = f"{PUBLIC_PATH_PREFIX}{bucket}/"
    _, found, key = path.partition(marker)
    if not found or not key:
        return None
    return unquote(key)

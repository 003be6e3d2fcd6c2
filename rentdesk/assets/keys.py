"""Storage key generation."""

from __future__ import annotations

import re
import secrets
import string
import time

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")
_PATH_SEPARATORS = re.compile(r"[/\\]")
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 7


class InvalidPathError(ValueError):
    """Raised when a folder and key would not form a plain storage path."""


def split_filename(filename: str) -> tuple[str, str]:
    """Split at the last dot into ``(base, extension)``; extension may be empty."""
    base, dot, ext = filename.rpartition(".")
    if not dot:
        return filename, ""
    return base, ext


def generate_key(original_filename: str) -> str:
    """Return ``<sanitized-base>_<ms-timestamp>_<token>.<ext>``.

    The random token is the only thing keeping two uploads of the same name
    in the same millisecond apart; the store is never checked for an
    existing key.
    """
    base, ext = split_filename(original_filename)
    safe_base = _UNSAFE_CHARS.sub("_", base)
    ext = _PATH_SEPARATORS.sub("_", ext)
    timestamp = int(time.time() * 1000)
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))

    key = f"{safe_base}_{timestamp}_{token}"
    if ext:
        key = f"{key}.{ext}"
    return key


def build_path(folder: str, key: str) -> str:
    """Join folder and key, refusing empty or dot segments."""
    folder = folder.strip("/")
    path = f"{folder}/{key}" if folder else key
    if any(segment in ("", ".", "..") for segment in path.split("/")):
        raise InvalidPathError(f"Invalid storage path: {path!r}")
    return path

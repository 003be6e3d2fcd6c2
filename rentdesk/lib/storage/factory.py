"""Build the configured object store backend."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING

from rentdesk.lib.storage.local import LocalStorageBackend

if TYPE_CHECKING:
    from rentdesk.config import StorageConfig
    from rentdesk.lib.storage.base import ObjectStore


def create_storage_backend(config: StorageConfig) -> ObjectStore:
    """Instantiate a storage backend from configuration."""
    backend_type = config.backend

    if backend_type == "local":
        return LocalStorageBackend(
            base_path=Path(config.local_path),
            public_origin=config.public_origin,
        )

    if backend_type == "supabase":
        from rentdesk.lib.storage.supabase import SupabaseStorageBackend

        if config.supabase is None:
            raise ValueError("storage.supabase must be configured for the 'supabase' backend")
        return SupabaseStorageBackend(config.supabase)

    # Dynamic import: "module:ClassName"
    if ":" in backend_type:
        parts = backend_type.split(":")
        if len(parts) != 2:
            raise ValueError(
                f"Invalid backend spec '{backend_type}': must contain exactly one colon"
            )
        module_path, class_name = parts
        module = importlib.import_module(module_path)
        cls = getattr(module, class_name)
        return cls(config)

    raise ValueError(
        f"Unknown storage backend '{backend_type}'. "
        "Use 'local', 'supabase', or 'module:ClassName'."
    )

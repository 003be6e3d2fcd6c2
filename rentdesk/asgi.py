"""ASGI application factory for rentdesk.

Usage:
    hypercorn rentdesk.asgi:app
"""

from __future__ import annotations

import logging
from pathlib import Path

from litestar import Litestar

from rentdesk.assets.lifecycle import AssetLifecycle
from rentdesk.config import Settings, get_settings
from rentdesk.controllers.assets import AssetController
from rentdesk.lib import observability
from rentdesk.lib.exceptions import EXCEPTION_HANDLERS
from rentdesk.lib.storage import ObjectStore, create_storage_backend
from rentdesk.middleware.storage import StorageFilesMiddleware

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: ObjectStore | None = None) -> Litestar:
    """Build the Litestar app around a single object store backend.

    ``store`` overrides the configured backend, which is how tests inject a
    fake.
    """
    settings = settings or get_settings()
    store = store or create_storage_backend(settings.storage)

    async def on_shutdown(_app: Litestar) -> None:
        """Release the storage client."""
        await store.close()

    app = Litestar(
        on_shutdown=[on_shutdown],
        route_handlers=[AssetController],
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    app.state.asset_lifecycle = AssetLifecycle(store)
    app.state.asset_policies = settings.assets
    return app


def create_asgi_app(settings: Settings | None = None):
    """Wrap the Litestar app with observability and local file serving."""
    settings = settings or get_settings()
    observability.configure(settings)
    observability.instrument_httpx()

    asgi_app = observability.instrument_app(create_app(settings))
    if settings.storage.backend == "local":
        asgi_app = StorageFilesMiddleware(asgi_app, base_path=Path(settings.storage.local_path))
    logger.info("Asset storage backend: %s", settings.storage.backend)
    return asgi_app


def __getattr__(name: str):
    # Build lazily so importing this module doesn't read config.
    if name == "app":
        global app
        app = create_asgi_app()
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

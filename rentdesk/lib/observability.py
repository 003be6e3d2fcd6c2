"""Optional Pydantic Logfire tracing for asset operations.

Lifecycle operations run inside ``span`` and unhandled request errors are
reported through ``exception``. When logfire is not installed, or the
``logfire`` config section leaves it disabled, every helper here does
nothing and callers fall back to stdlib logging.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rentdesk.config import Settings

_logfire = None
_configured = False


def is_available() -> bool:
    return _logfire is not None and _configured


def configure(settings: Settings) -> None:
    """Turn tracing on when ``settings.logfire.enabled`` and logfire is importable."""
    global _logfire, _configured

    config = settings.logfire
    if not config.enabled:
        return

    try:
        import logfire as lf
    except ImportError:
        return

    kwargs: dict[str, Any] = {
        "service_name": config.service_name,
        "send_to_logfire": "if-token-present",
    }
    if config.environment:
        kwargs["environment"] = config.environment
    if config.console:
        kwargs["console"] = lf.ConsoleOptions()

    lf.configure(**kwargs)
    _logfire = lf
    _configured = True


def instrument_app(app):
    """Trace incoming dashboard requests; returns ``app`` untouched when tracing is off."""
    if not is_available():
        return app
    return _logfire.instrument_asgi(app)


def instrument_httpx() -> None:
    """Trace calls the Supabase backend makes to the storage API."""
    if is_available():
        _logfire.instrument_httpx()


@contextmanager
def span(name: str, **attrs: Any):
    """Wrap one store round-trip; yields None when tracing is off."""
    if is_available():
        with _logfire.span(name, **attrs) as s:
            yield s
    else:
        yield None


def exception(msg: str, **kwargs: Any) -> bool:
    """Report the active exception. Returns False so the caller can log it itself."""
    if is_available():
        _logfire.exception(msg, **kwargs)
        return True
    return False

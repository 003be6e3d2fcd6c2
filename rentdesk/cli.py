"""CLI commands for rentdesk."""

import asyncio
import json
import mimetypes
import sys
from pathlib import Path

import click

from rentdesk.config import clear_settings_cache, get_settings, set_config_path


@click.group()
@click.version_option(package_name="rentdesk")
@click.option(
    "-f",
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Use this YAML config instead of app.yaml",
)
def cli(config_file):
    """rentdesk - asset storage for the vehicle-rental dashboard."""
    if config_file is not None:
        set_config_path(config_file)
        clear_settings_cache()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the rentdesk server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "rentdesk.asgi:app"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from rentdesk.asgi import create_asgi_app

    app = create_asgi_app()
    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


KIND_CHOICE = click.Choice(["vehicle", "campaign", "document"])


def _read_asset_file(path: Path, content_type: str | None):
    from rentdesk.assets.types import AssetFile

    content_type = content_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return AssetFile(filename=path.name, content_type=content_type, data=path.read_bytes())


def _run_lifecycle(operation):
    """Run ``operation(lifecycle)`` against the configured store, print the result, and exit."""
    from rentdesk.assets.lifecycle import AssetLifecycle
    from rentdesk.lib.storage import create_storage_backend

    settings = get_settings()

    async def _run():
        store = create_storage_backend(settings.storage)
        try:
            return await operation(AssetLifecycle(store))
        finally:
            await store.close()

    result = asyncio.run(_run())
    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        sys.exit(1)


def _policy(kind, customer_id):
    from rentdesk.assets.policies import CustomerIdError, policy_for

    try:
        return policy_for(kind, customer_id, get_settings().assets)
    except CustomerIdError as exc:
        raise click.UsageError(f"{exc} (use --customer-id)")


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--customer-id", default=None, help="Owning customer (documents only)")
@click.option("--content-type", default=None, help="Override the guessed MIME type")
def upload(kind, file, customer_id, content_type):
    """Upload FILE under the policy for KIND and print its public URL."""
    options = _policy(kind, customer_id)
    asset = _read_asset_file(file, content_type)
    _run_lifecycle(lambda lifecycle: lifecycle.upload(asset, options))


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("old_url")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--customer-id", default=None, help="Owning customer (documents only)")
@click.option("--content-type", default=None, help="Override the guessed MIME type")
def replace(kind, old_url, file, customer_id, content_type):
    """Upload FILE, then remove the object behind OLD_URL."""
    options = _policy(kind, customer_id)
    asset = _read_asset_file(file, content_type)
    _run_lifecycle(lambda lifecycle: lifecycle.replace(old_url, asset, options))


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("url")
def delete(kind, url):
    """Remove the object behind URL. URLs outside KIND's bucket are ignored."""
    from rentdesk.assets.policies import POLICIES, AssetKind

    bucket = POLICIES[AssetKind(kind)].bucket
    _run_lifecycle(lambda lifecycle: lifecycle.delete(bucket, url))


if __name__ == "__main__":
    cli()

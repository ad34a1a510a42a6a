"""CLI interface for Modview.

Command-line tool for running the module page server.
"""

import logging
from pathlib import Path

import click

from modview.config import Config


@click.group()
def cli() -> None:
    """Modview - module pages for a versioned package registry."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover modview.toml)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--api-url",
    default=None,
    help="Page metadata service URL (overrides config)",
)
@click.option(
    "--cdn-url",
    default=None,
    help="Version list CDN URL (overrides config)",
)
@click.option(
    "--storage-url",
    default=None,
    help="Raw file storage URL (overrides config)",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Upstream request timeout in seconds (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log every resolution decision)",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    api_url: str | None,
    cdn_url: str | None,
    storage_url: str | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Start the module page server."""
    from modview.server import run_server

    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    config = config.with_overrides(
        host=host,
        port=port,
        api_url=api_url,
        cdn_url=cdn_url,
        storage_url=storage_url,
        timeout=timeout,
    )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Metadata service: {config.upstream.api_url}")
    click.echo(f"Version lists: {config.upstream.cdn_url}")
    click.echo(f"Raw storage: {config.upstream.storage_url}")
    if config.upstream.timeout is not None:
        click.echo(f"Upstream timeout: {config.upstream.timeout}s")

    run_server(config)

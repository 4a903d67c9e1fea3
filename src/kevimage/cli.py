"""Click CLI for kevimage — serve, fetch, and inspect the cache."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from kevimage.config.schema import ServiceConfig, load_service_config

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level)
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _load_config(**overrides: object) -> ServiceConfig:
    try:
        return load_service_config(**overrides)
    except ValueError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(2)


@click.group()
@click.version_option(package_name="kevimage")
def cli() -> None:
    """kevimage — URL-addressed image compression cache."""


@cli.command()
@click.option("--host", type=str, default=None, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Content store directory.")
@click.option("--index-path", type=click.Path(), default=None, help="SQLite index file.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def serve(
    host: str | None,
    port: int | None,
    cache_dir: str | None,
    index_path: str | None,
    verbose: int,
) -> None:
    """Run the HTTP service."""
    import uvicorn

    from kevimage.server.app import create_app

    config = _load_config(host=host, port=port, cache_dir=cache_dir, index_path=index_path)
    _setup_logging(verbose, config.log_level)

    app = create_app(config=config)
    console.print(f"[green]kevimage listening on http://{config.host}:{config.port}[/green]")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


@cli.command()
@click.argument("url")
@click.option("-o", "--output", type=click.Path(), help="Write the compressed image here.")
@click.option("--cache-dir", type=click.Path(), default=None, help="Content store directory.")
@click.option("--index-path", type=click.Path(), default=None, help="SQLite index file.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fetch(
    url: str,
    output: str | None,
    cache_dir: str | None,
    index_path: str | None,
    verbose: int,
) -> None:
    """Resolve URL through the cache and save the compressed image."""
    from kevimage.core import compress_url
    from kevimage.errors.exceptions import KevimageError
    from kevimage.utils.url import validate_source_url

    config = _load_config(cache_dir=cache_dir, index_path=index_path)
    _setup_logging(verbose, config.log_level)

    try:
        source_url = validate_source_url(url)
        artifact = compress_url(source_url, cache_dir=cache_dir, index_path=index_path)
    except KevimageError as e:
        error_console.print(f"[red]Error ({e.error_kind}):[/red] {e.message}")
        sys.exit(1)

    out_path = Path(output) if output else Path(artifact.record.content_key)
    out_path.write_bytes(artifact.data)

    record = artifact.record
    console.print(
        f"[green]{artifact.cache_status.value}[/green] {record.source_url} -> {out_path} "
        f"({record.original_size:,} -> {record.compressed_size:,} bytes)"
    )


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-dir", type=click.Path(), default=None, help="Content store directory.")
@click.option("--index-path", type=click.Path(), default=None, help="SQLite index file.")
def cache_stats(cache_dir: str | None, index_path: str | None) -> None:
    """Show cache statistics."""
    from kevimage.cache.index import SqliteIndex
    from kevimage.cache.store import ContentStore

    config = _load_config(cache_dir=cache_dir, index_path=index_path)
    index = SqliteIndex(config.index_path)
    store = ContentStore(config.cache_dir)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    try:
        summary = index.summary()
        table.add_row("Records", str(summary.entries))
        table.add_row("Stored objects", str(len(store.keys())))
        table.add_row("Distinct content keys", str(summary.distinct_content_keys))
        table.add_row("Original bytes", f"{summary.original_bytes:,}")
        table.add_row("Compressed bytes", f"{summary.compressed_bytes:,}")
        table.add_row("Savings", f"{summary.savings_ratio:.1%}")
        table.add_row("Store size (MB)", f"{store.size_bytes / (1024 * 1024):.1f}")
    finally:
        index.close()

    console.print(table)


@cache.command("verify")
@click.option("--cache-dir", type=click.Path(), default=None, help="Content store directory.")
@click.option("--index-path", type=click.Path(), default=None, help="SQLite index file.")
def cache_verify(cache_dir: str | None, index_path: str | None) -> None:
    """Check every record has stored bytes; list unreferenced objects."""
    from kevimage.cache.index import SqliteIndex
    from kevimage.cache.store import ContentStore
    from kevimage.cache.verify import verify_cache

    config = _load_config(cache_dir=cache_dir, index_path=index_path)
    index = SqliteIndex(config.index_path)
    try:
        report = verify_cache(ContentStore(config.cache_dir), index)
    finally:
        index.close()

    console.print(f"Checked {report.checked} records")
    for key in report.orphans:
        console.print(f"[yellow]Orphan:[/yellow] {key}")

    if report.corrupt:
        table = Table(title="Corrupt Entries", show_header=True)
        table.add_column("Source URL", style="cyan")
        table.add_column("Content key")
        for record in report.corrupt:
            table.add_row(record.source_url, record.content_key)
        error_console.print(table)
        sys.exit(1)

    console.print("[green]Cache is consistent.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()

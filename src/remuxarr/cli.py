"""Command-line interface for remuxarr."""

import asyncio
import signal
import sys
import threading
from pathlib import Path

import click

from remuxarr import __version__
from remuxarr.config import load_config
from remuxarr.core.library import DirectoryLibrary, LibraryRemuxTask
from remuxarr.core.pipeline import RemuxPipeline
from remuxarr.models.file import ProcessResult
from remuxarr.utils.logger import get_logger, setup_logging

_STATUS_COLORS = {
    "success": "green",
    "skipped": "yellow",
    "dry_run": "cyan",
    "failed": "red",
    "error": "red",
}


def _echo_result(result: ProcessResult, indent: str = "") -> None:
    click.secho(
        f"{indent}{result}",
        fg=_STATUS_COLORS.get(result.status, "red"),
        err=result.status in ("failed", "error"),
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """remuxarr - strip, extract and OCR tracks of Matroska files."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def process(ctx, file):
    """Process a single container file."""
    config = ctx.obj["config"]

    click.echo(f"Processing: {file}")

    result = asyncio.run(RemuxPipeline(config).process(file))
    _echo_result(result)

    sys.exit(1 if result.status in ("failed", "error") else 0)


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def plan(ctx, file):
    """Show what would be done to a container without changing it."""
    config = ctx.obj["config"].model_copy(deep=True)
    config.execution.dry_run = True

    result = asyncio.run(RemuxPipeline(config).process(file))
    _echo_result(result)

    sys.exit(1 if result.status in ("failed", "error") else 0)


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--recursive/--no-recursive",
    "-r/-R",
    default=True,
    help="Scan subdirectories recursively (default: True)",
)
@click.pass_context
def scan(ctx, path, recursive):
    """Scan a directory and process all Matroska files one by one.

    Ctrl+C stops the scan once the current file is finished.
    """
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    click.echo(f"Scanning: {path}")
    click.echo(f"Recursive: {recursive}")
    click.echo("")

    library = DirectoryLibrary(path, recursive=recursive)
    try:
        total = library.get_count()
    except Exception as e:
        click.secho(f"✗ Error scanning: {e}", fg="red", err=True)
        sys.exit(1)

    if not total:
        click.secho("⊘ No Matroska files found", fg="yellow")
        sys.exit(0)

    click.echo(f"Found {total} file(s)")
    click.echo("")

    cancel = threading.Event()

    def handle_signal(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        logger.info("Cancellation requested", signal=signum)
        click.secho("\nStopping after the current file (press Ctrl+C again to abort)", fg="yellow", err=True)
        cancel.set()

    signal.signal(signal.SIGINT, handle_signal)

    progress = {"percent": 0.0}

    def on_result(item, result):
        click.echo(f"[{progress['percent']:5.1f}%] {item.path.name}")
        _echo_result(result, indent="  ")
        click.echo("")

    def on_progress(percent):
        progress["percent"] = percent

    task = LibraryRemuxTask(RemuxPipeline(config), library)
    summary = asyncio.run(task.run(progress=on_progress, cancel=cancel, on_result=on_result))

    counts = summary.counts
    click.echo("=" * 60)
    click.echo("Summary:" + (" (cancelled)" if summary.cancelled else ""))
    click.secho(f"  ✓ Success:  {counts['success']}", fg="green")
    click.secho(f"  ⊙ Dry run:  {counts['dry_run']}", fg="cyan")
    click.secho(f"  ⊘ Skipped:  {counts['skipped']}", fg="yellow")
    click.secho(f"  ✗ Failed:   {counts['failed']}", fg="red")
    click.secho(f"  ✗ Errors:   {counts['error']}", fg="red")
    click.echo(f"  Total:      {summary.total}")

    if summary.has_failures:
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"remuxarr v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()

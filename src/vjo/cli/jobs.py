"""Job commands: screenshot, convert and probe.

Each command runs one job to completion on a fresh event loop and prints
the resulting ``file://`` URL (or codec name) on stdout.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from vjo.cli.exit_codes import ExitCode
from vjo.jobs.exceptions import EngineUnavailableError, VJOError
from vjo.pipelines.events import CONVERSION_PROGRESS
from vjo.scheme import VideoScheme

logger = logging.getLogger(__name__)

_out_dir_option = click.option(
    "--out-dir",
    type=click.Path(file_okay=False, path_type=Path, resolve_path=True),
    default=None,
    help="Directory for the output file.",
)
_priority_option = click.option(
    "--priority",
    type=click.FloatRange(0, 100, clamp=True),
    default=0,
    show_default=True,
    help="Process priority percentage (0 = lowest, 100 = highest).",
)


def _exit_for(error: VJOError) -> ExitCode:
    if isinstance(error, EngineUnavailableError):
        return ExitCode.ENGINE_UNAVAILABLE
    return ExitCode.JOB_FAILED


def _run_job(ctx: click.Context, coro_factory) -> None:
    """Run a job coroutine and map job errors to exit codes."""
    try:
        result = asyncio.run(coro_factory())
    except VJOError as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(_exit_for(e))
    else:
        click.echo(result)


def _make_scheme(ctx: click.Context) -> VideoScheme:
    return VideoScheme(config=ctx.obj["config"])


@click.command("screenshot")
@click.argument("source_url")
@_out_dir_option
@_priority_option
@click.pass_context
def screenshot_command(
    ctx: click.Context,
    source_url: str,
    out_dir: Path | None,
    priority: float,
) -> None:
    """Extract a preview frame from SOURCE_URL (file:// or http(s)://)."""
    options = {"outDir": out_dir, "priority": priority}

    async def job() -> str:
        scheme = _make_scheme(ctx)
        scheme.init_engine()
        return await scheme.screenshot(source_url, options)

    _run_job(ctx, job)


@click.command("convert")
@click.argument("source_url")
@_out_dir_option
@_priority_option
@click.option(
    "--slow",
    "enforce_slow",
    is_flag=True,
    help="Always re-encode, skipping the codec probe.",
)
@click.option("--progress/--no-progress", default=True, help="Show progress.")
@click.pass_context
def convert_command(
    ctx: click.Context,
    source_url: str,
    out_dir: Path | None,
    priority: float,
    enforce_slow: bool,
    progress: bool,
) -> None:
    """Convert SOURCE_URL to MP4 (H.264)."""
    options = {"outDir": out_dir, "priority": priority, "enforceSlow": enforce_slow}
    show_progress = progress and sys.stderr.isatty()

    def on_progress(record) -> None:
        if record.percent is not None:
            sys.stderr.write(f"\rConverting: {record.percent:5.1f}%")
            sys.stderr.flush()

    async def job() -> str:
        scheme = _make_scheme(ctx)
        scheme.init_engine()
        handle = scheme.convert_to_file(source_url, options)
        if show_progress:
            handle.on(CONVERSION_PROGRESS, on_progress)
        try:
            return await handle.wait()
        finally:
            if show_progress:
                sys.stderr.write("\n")

    _run_job(ctx, job)


@click.command("probe")
@click.argument("source_url")
@click.pass_context
def probe_command(ctx: click.Context, source_url: str) -> None:
    """Print the video codec of SOURCE_URL."""

    async def job() -> str:
        scheme = _make_scheme(ctx)
        scheme.init_engine()
        return await scheme.get_codec(source_url)

    _run_job(ctx, job)

"""Doctor command for checking the video engine.

Reports whether ffmpeg was found, its version, and the effective job
configuration.
"""

from __future__ import annotations

import asyncio
import json

import click

from vjo.cli.exit_codes import ExitCode
from vjo.engine.models import EngineInfo
from vjo.engine.support import EngineSupport


def _format_status(available: bool) -> str:
    return "✓" if available else "✗"


def _info_to_dict(info: EngineInfo) -> dict:
    return {
        "name": info.name,
        "path": str(info.path) if info.path else None,
        "version": info.version,
        "status": info.status.value,
        "status_message": info.status_message,
    }


@click.command("doctor")
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg is available.

    Exit codes:
      0 - ffmpeg available
      2 - ffmpeg missing, outdated or broken
    """
    config = ctx.obj["config"]
    support = EngineSupport(configured_path=config.tools.ffmpeg)
    info = asyncio.run(support.detect())

    if json_output:
        click.echo(json.dumps(_info_to_dict(info), indent=2))
    else:
        click.echo("Video Engine Health Check")
        click.echo("=" * 40)
        version = info.version or "not found"
        click.echo(f"  {_format_status(info.is_available())} ffmpeg: {version}")
        if info.path:
            click.echo(f"    ├─ Path: {info.path}")
        if info.status_message:
            click.echo(f"    └─ {info.status_message}")
        click.echo()
        click.echo("Job timeouts (seconds, 0 = none):")
        click.echo(f"  probe:      {config.jobs.probe_timeout:g}")
        click.echo(f"  screenshot: {config.jobs.screenshot_timeout:g}")
        click.echo(f"  conversion: {config.jobs.conversion_timeout:g}")

    if not info.is_available():
        ctx.exit(ExitCode.ENGINE_UNAVAILABLE)

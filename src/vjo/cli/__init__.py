"""CLI module for Video Job Orchestrator."""

import logging
from pathlib import Path

import click

from vjo.config import build_logging_config, get_config
from vjo.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="video-job-orchestrator")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.vjo/config.toml).",
)
@click.option(
    "--ffmpeg",
    "ffmpeg_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the ffmpeg executable.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Override log format (default: text).",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    ffmpeg_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_format: str | None,
) -> None:
    """Video Job Orchestrator - previews and MP4 conversion via ffmpeg."""
    ctx.ensure_object(dict)
    # Tests may pass a ready-made config
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(
                config_path=config_path, ffmpeg_path=ffmpeg_path
            )
        except ValueError as e:
            raise click.UsageError(f"Invalid configuration: {e}") from e

    config = ctx.obj["config"]
    try:
        logging_config = build_logging_config(
            config.logging,
            level=log_level,
            file=log_file,
            format=log_format,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    configure_logging(logging_config)


def _register_commands() -> None:
    from vjo.cli.doctor import doctor_command
    from vjo.cli.jobs import convert_command, probe_command, screenshot_command

    main.add_command(screenshot_command)
    main.add_command(convert_command)
    main.add_command(probe_command)
    main.add_command(doctor_command)


_register_commands()

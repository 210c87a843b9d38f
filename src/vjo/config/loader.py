"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (VJO_*)
3. Config file (~/.vjo/config.toml)
4. Default values

Environment variables:
- VJO_CONFIG_PATH: Path to config file (overrides default location)
- VJO_DATA_DIR: Path to data directory (overrides ~/.vjo/)
- VJO_FFMPEG_PATH: Path to ffmpeg executable
- VJO_PROBE_TIMEOUT: Codec probe timeout in seconds (default 30)
- VJO_SCREENSHOT_TIMEOUT: Screenshot timeout in seconds (default 120)
- VJO_CONVERSION_TIMEOUT: Conversion timeout in seconds (default 0, none)
- VJO_LOG_LEVEL: debug, info, warning or error
- VJO_LOG_FORMAT: text or json
- VJO_LOG_FILE: Log file path
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from vjo.config.env import EnvReader
from vjo.config.models import (
    ConversionConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VJOConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".vjo"
CONFIG_FILE_NAME = "config.toml"


def get_data_dir(env: EnvReader | None = None) -> Path:
    """Get the data directory, ``~/.vjo/`` unless VJO_DATA_DIR is set."""
    env = env or EnvReader()
    return env.get_path("VJO_DATA_DIR") or DEFAULT_CONFIG_DIR


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the config file path.

    VJO_CONFIG_PATH takes precedence, then ``<data dir>/config.toml``.
    """
    env = env or EnvReader()
    return env.get_path("VJO_CONFIG_PATH") or get_data_dir(env) / CONFIG_FILE_NAME


def load_config_file(path: Path | None = None, env: EnvReader | None = None) -> dict:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses the default location.
        env: Environment reader used to find the default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist or
        cannot be parsed.
    """
    if path is None:
        path = get_default_config_path(env)

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}
    logger.debug("Loaded config from %s", path)
    return config


def _section(file_config: dict, name: str) -> dict[str, Any]:
    section = file_config.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring config section [%s]: not a table", name)
        return {}
    return section


def _file_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def get_config(
    config_path: Path | None = None,
    env: EnvReader | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
) -> VJOConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VJO_CONFIG_PATH).
        env: Environment reader. None reads os.environ.
        ffmpeg_path: CLI override for the ffmpeg path.

    Returns:
        VJOConfig with merged configuration.

    Raises:
        ValueError: If a merged value fails validation.
    """
    env = env or EnvReader()
    file_config = load_config_file(config_path, env)

    tools_file = _section(file_config, "tools")
    tools = ToolPathsConfig(
        ffmpeg=(
            ffmpeg_path
            or env.get_path("VJO_FFMPEG_PATH")
            or _file_path(tools_file.get("ffmpeg"))
        ),
    )

    jobs_file = _section(file_config, "jobs")
    defaults = JobsConfig()
    jobs = JobsConfig(
        probe_timeout=env.get_float(
            "VJO_PROBE_TIMEOUT",
            float(jobs_file.get("probe_timeout", defaults.probe_timeout)),
        ),
        screenshot_timeout=env.get_float(
            "VJO_SCREENSHOT_TIMEOUT",
            float(jobs_file.get("screenshot_timeout", defaults.screenshot_timeout)),
        ),
        conversion_timeout=env.get_float(
            "VJO_CONVERSION_TIMEOUT",
            float(jobs_file.get("conversion_timeout", defaults.conversion_timeout)),
        ),
    )

    conversion_file = _section(file_config, "conversion")
    known = set(ConversionConfig.__dataclass_fields__)
    unknown = set(conversion_file) - known
    if unknown:
        logger.warning("Ignoring unknown [conversion] keys: %s", sorted(unknown))
    conversion = ConversionConfig(
        **{k: v for k, v in conversion_file.items() if k in known}
    )

    logging_file = _section(file_config, "logging")
    log_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        level=env.get_str(
            "VJO_LOG_LEVEL", logging_file.get("level", log_defaults.level)
        ),
        file=env.get_path("VJO_LOG_FILE") or _file_path(logging_file.get("file")),
        format=env.get_str(
            "VJO_LOG_FORMAT", logging_file.get("format", log_defaults.format)
        ),
        include_stderr=bool(
            logging_file.get("include_stderr", log_defaults.include_stderr)
        ),
        max_bytes=int(logging_file.get("max_bytes", log_defaults.max_bytes)),
        backup_count=int(logging_file.get("backup_count", log_defaults.backup_count)),
    )

    return VJOConfig(
        tools=tools,
        jobs=jobs,
        conversion=conversion,
        logging=logging_config,
    )

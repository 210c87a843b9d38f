"""Configuration management.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VJO_*)
3. Config file (~/.vjo/config.toml)
4. Default values (lowest priority)
"""

from vjo.config.env import EnvReader
from vjo.config.loader import (
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from vjo.config.logging_factory import build_logging_config
from vjo.config.models import (
    ConversionConfig,
    JobsConfig,
    LoggingConfig,
    ToolPathsConfig,
    VJOConfig,
)

__all__ = [
    "ConversionConfig",
    "EnvReader",
    "JobsConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    "VJOConfig",
    "build_logging_config",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
]

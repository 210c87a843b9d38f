"""Unit tests for configuration loading and precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from vjo.config.env import EnvReader
from vjo.config.loader import get_config, get_default_config_path, load_config_file
from vjo.config.logging_factory import build_logging_config
from vjo.config.models import ConversionConfig, JobsConfig, LoggingConfig

CONFIG_TOML = """
[tools]
ffmpeg = "/opt/ffmpeg/bin/ffmpeg"

[jobs]
probe_timeout = 10
screenshot_timeout = 45.5

[conversion]
preset = "medium"
crf = 18
bogus = true

[logging]
level = "debug"
format = "json"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestLoadConfigFile:
    """Tests for load_config_file()."""

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_config_file(tmp_path / "nope.toml") == {}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[jobs\nprobe_timeout = ")
        assert load_config_file(path) == {}

    def test_default_path_from_env(self, tmp_path: Path) -> None:
        env = EnvReader(env={"VJO_DATA_DIR": str(tmp_path)})
        assert get_default_config_path(env) == tmp_path / "config.toml"

        env = EnvReader(env={"VJO_CONFIG_PATH": str(tmp_path / "x.toml")})
        assert get_default_config_path(env) == tmp_path / "x.toml"


class TestGetConfig:
    """Tests for get_config() precedence."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = get_config(config_path=tmp_path / "none.toml", env=EnvReader(env={}))

        assert config.tools.ffmpeg is None
        assert config.jobs.probe_timeout == 30.0
        assert config.jobs.screenshot_timeout == 120.0
        assert config.jobs.conversion_timeout == 0.0
        assert config.conversion == ConversionConfig()
        assert config.logging.level == "info"

    def test_file_values(self, config_file: Path) -> None:
        config = get_config(config_path=config_file, env=EnvReader(env={}))

        assert config.tools.ffmpeg == Path("/opt/ffmpeg/bin/ffmpeg")
        assert config.jobs.probe_timeout == 10.0
        assert config.jobs.screenshot_timeout == 45.5
        assert config.conversion.preset == "medium"
        assert config.conversion.crf == 18
        assert config.logging.format == "json"

    def test_env_overrides_file(self, config_file: Path) -> None:
        env = EnvReader(
            env={
                "VJO_FFMPEG_PATH": "/usr/local/bin/ffmpeg",
                "VJO_PROBE_TIMEOUT": "3",
                "VJO_CONVERSION_TIMEOUT": "600",
                "VJO_LOG_LEVEL": "warning",
            }
        )
        config = get_config(config_path=config_file, env=env)

        assert config.tools.ffmpeg == Path("/usr/local/bin/ffmpeg")
        assert config.jobs.probe_timeout == 3.0
        assert config.jobs.conversion_timeout == 600.0
        assert config.logging.level == "warning"

    def test_cli_overrides_env(self, config_file: Path) -> None:
        env = EnvReader(env={"VJO_FFMPEG_PATH": "/usr/local/bin/ffmpeg"})
        config = get_config(
            config_path=config_file, env=env, ffmpeg_path=Path("/cli/ffmpeg")
        )
        assert config.tools.ffmpeg == Path("/cli/ffmpeg")

    def test_invalid_env_number_uses_file_value(self, config_file: Path) -> None:
        env = EnvReader(env={"VJO_PROBE_TIMEOUT": "soon"})
        config = get_config(config_path=config_file, env=env)
        assert config.jobs.probe_timeout == 10.0

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[conversion]\ncrf = 99\n")
        with pytest.raises(ValueError, match="crf"):
            get_config(config_path=path, env=EnvReader(env={}))


class TestConfigModels:
    """Tests for dataclass validation."""

    def test_negative_timeout(self) -> None:
        with pytest.raises(ValueError, match="probe_timeout"):
            JobsConfig(probe_timeout=-1)

    def test_unknown_container(self) -> None:
        with pytest.raises(ValueError, match="container"):
            ConversionConfig(container="avi")

    def test_unknown_log_format(self) -> None:
        with pytest.raises(ValueError, match="format"):
            LoggingConfig(format="xml")


class TestBuildLoggingConfig:
    """Tests for build_logging_config()."""

    def test_overrides_applied(self, tmp_path: Path) -> None:
        base = LoggingConfig(level="info", max_bytes=1024)
        config = build_logging_config(
            base, level="debug", file=tmp_path / "vjo.log", format="json"
        )
        assert config.level == "debug"
        assert config.file == tmp_path / "vjo.log"
        assert config.format == "json"
        assert config.max_bytes == 1024

    def test_none_keeps_base(self) -> None:
        base = LoggingConfig(level="error")
        assert build_logging_config(base).level == "error"

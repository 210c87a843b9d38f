"""Unit tests for EnvReader."""

from pathlib import Path

from vjo.config.env import EnvReader


class TestEnvReader:
    """Tests for typed environment access."""

    def test_missing_returns_default(self) -> None:
        reader = EnvReader(env={})
        assert reader.get_str("X", "d") == "d"
        assert reader.get_int("X", 3) == 3
        assert reader.get_float("X") is None

    def test_int_and_float(self) -> None:
        reader = EnvReader(env={"I": "7", "F": "2.5", "BAD": "x"})
        assert reader.get_int("I") == 7
        assert reader.get_float("F") == 2.5
        assert reader.get_int("BAD", 1) == 1
        assert reader.get_float("BAD", 1.5) == 1.5

    def test_bool(self) -> None:
        reader = EnvReader(env={"A": "Yes", "B": "0"})
        assert reader.get_bool("A") is True
        assert reader.get_bool("B") is False
        assert reader.get_bool("C", True) is True

    def test_path(self) -> None:
        reader = EnvReader(env={"P": "/srv/videos", "EMPTY": ""})
        assert reader.get_path("P") == Path("/srv/videos")
        assert reader.get_path("EMPTY") is None

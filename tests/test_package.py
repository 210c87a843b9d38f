"""Basic package tests."""

import vjo


def test_version() -> None:
    """Package exposes a version string."""
    assert isinstance(vjo.__version__, str)
    assert vjo.__version__ == "0.1.0"

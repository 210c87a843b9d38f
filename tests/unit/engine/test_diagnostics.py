"""Unit tests for engine error classification."""

import pytest

from vjo.engine.diagnostics import classify_error, last_diagnostic_line


class TestClassifyError:
    """Tests for classify_error()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("pipe:0: No such file or directory", "No such file or directory"),
            (
                "something: Invalid data found when processing input",
                "Invalid data found when processing input",
            ),
            ("a: b: c", "c"),
            ("  /tmp/x.avi: Permission denied  \n", "Permission denied"),
        ],
    )
    def test_takes_last_clause(self, raw: str, expected: str) -> None:
        assert classify_error(raw) == expected

    def test_without_separator_returns_raw_unchanged(self) -> None:
        assert classify_error("Conversion failed") == "Conversion failed"
        assert classify_error("  Conversion failed\n") == "  Conversion failed\n"

    def test_colon_without_space_is_not_a_separator(self) -> None:
        """URLs and stream specifiers keep their colons."""
        assert classify_error("http://host/x.mp4") == "http://host/x.mp4"

    def test_empty(self) -> None:
        assert classify_error("") == ""


class TestLastDiagnosticLine:
    """Tests for last_diagnostic_line()."""

    def test_skips_trailer_and_progress(self) -> None:
        lines = [
            "Input #0, avi, from 'x.avi':",
            "x.avi: Invalid data found when processing input",
            "frame=    0 fps=0.0 q=0.0 size=       0kB time=00:00:00.00",
            "Conversion failed!",
            "",
        ]
        assert (
            last_diagnostic_line(lines)
            == "x.avi: Invalid data found when processing input"
        )

    def test_no_diagnostic(self) -> None:
        assert last_diagnostic_line(["", "   "]) is None
        assert last_diagnostic_line([]) is None

"""Unit tests for the niceness mapper."""

from unittest.mock import patch

import pytest

from vjo.core.niceness import MAX_NICE, MIN_NICE, apply_niceness, get_nice_value


class TestGetNiceValue:
    """Tests for get_nice_value()."""

    def test_default_is_neutral(self) -> None:
        """No argument maps to niceness 0."""
        assert get_nice_value() == 0

    def test_none_is_neutral(self) -> None:
        assert get_nice_value(None) == 0

    def test_nan_is_neutral(self) -> None:
        """NaN has no place on the scale and is treated like no priority."""
        assert get_nice_value(float("nan")) == 0

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [
            (0, 20),
            (25, 10),
            (50, 0),
            (75, -10),
            (100, -20),
        ],
    )
    def test_linear_inverted_mapping(self, percent: float, expected: int) -> None:
        """0% is the lowest priority and 100% the highest."""
        assert get_nice_value(percent) == expected

    def test_clamps_below_range(self) -> None:
        assert get_nice_value(-50) == MAX_NICE

    def test_clamps_above_range(self) -> None:
        assert get_nice_value(250) == MIN_NICE

    def test_fractional_percent_rounds(self) -> None:
        """Fractional results are rounded to the nearest integer."""
        assert get_nice_value(1) == 20  # 19.6
        assert get_nice_value(2) == 19  # 19.2

    def test_result_always_in_range(self) -> None:
        for percent in range(-10, 111, 7):
            assert MIN_NICE <= get_nice_value(percent) <= MAX_NICE


class TestApplyNiceness:
    """Tests for apply_niceness()."""

    def test_zero_is_noop(self) -> None:
        with patch("vjo.core.niceness.os.setpriority", create=True) as mock_set:
            assert apply_niceness(1234, 0) is True
        mock_set.assert_not_called()

    def test_sets_priority(self) -> None:
        with patch("vjo.core.niceness.os.setpriority", create=True) as mock_set:
            assert apply_niceness(1234, 10) is True
        mock_set.assert_called_once()
        assert mock_set.call_args.args[1:] == (1234, 10)

    def test_permission_error_is_not_fatal(self) -> None:
        """A denied priority change logs a warning and returns False."""
        with patch(
            "vjo.core.niceness.os.setpriority",
            create=True,
            side_effect=PermissionError("denied"),
        ):
            assert apply_niceness(1234, -10) is False

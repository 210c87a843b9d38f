"""Unit tests for job options validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vjo.jobs.exceptions import InvalidInputError
from vjo.jobs.options import JobOptions, coerce_options


class TestCoerceOptions:
    """Tests for coerce_options()."""

    def test_defaults(self) -> None:
        options = coerce_options(None)
        assert options.out_dir is None
        assert options.enforce_slow is False
        assert options.priority == 0

    def test_camel_case_keys(self) -> None:
        options = coerce_options(
            {"outDir": "/tmp/out", "enforceSlow": True, "priority": 75}
        )
        assert options.out_dir == Path("/tmp/out")
        assert options.enforce_slow is True
        assert options.priority == 75

    def test_field_names_accepted(self) -> None:
        options = coerce_options({"out_dir": Path("/srv"), "enforce_slow": True})
        assert options.out_dir == Path("/srv")
        assert options.enforce_slow is True

    def test_unknown_fields_ignored(self) -> None:
        options = coerce_options({"format": "webm", "priority": 10})
        assert options.priority == 10

    def test_none_values_use_defaults(self) -> None:
        options = coerce_options({"outDir": None, "priority": None})
        assert options == JobOptions()

    def test_passthrough(self) -> None:
        options = JobOptions(priority=5)
        assert coerce_options(options) is options

    def test_relative_out_dir_rejected(self) -> None:
        with pytest.raises(InvalidInputError, match="absolute"):
            coerce_options({"outDir": "relative/dir"})

    def test_non_numeric_priority_rejected(self) -> None:
        with pytest.raises(InvalidInputError, match="Invalid job options"):
            coerce_options({"priority": "high"})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "-inf"])
    def test_non_finite_priority_rejected(self, value) -> None:
        with pytest.raises(InvalidInputError, match="priority"):
            coerce_options({"priority": value})

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(InvalidInputError, match="mapping"):
            coerce_options(["outDir", "/tmp"])

    def test_options_are_frozen(self) -> None:
        options = coerce_options({"priority": 1})
        with pytest.raises(ValidationError):
            options.priority = 2

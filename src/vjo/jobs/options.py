"""Job options model.

Options arrive from callers as loosely-typed mappings using camelCase keys
(``outDir``, ``enforceSlow``, ``priority``). They are validated once, at the
pipeline boundary, into a frozen JobOptions.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vjo.jobs.exceptions import InvalidInputError


class JobOptions(BaseModel):
    """Validated options for a screenshot or conversion job.

    Unrecognized fields are ignored. Fields may be given by their
    camelCase alias or by field name.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    out_dir: Path | None = Field(default=None, alias="outDir")
    """Directory for output files, overrides the default location."""

    enforce_slow: bool = Field(default=False, alias="enforceSlow")
    """Skip the codec probe and always re-encode."""

    priority: float = Field(default=0, allow_inf_nan=False)
    """Priority percentage (0-100). Out of range values are clamped when
    mapped to a niceness; NaN and infinity are rejected."""

    @field_validator("out_dir")
    @classmethod
    def validate_out_dir(cls, v: Path | None) -> Path | None:
        """Require an absolute output directory."""
        if v is not None and not v.is_absolute():
            raise ValueError(f"outDir must be an absolute path, got '{v}'")
        return v


def coerce_options(options: JobOptions | Mapping[str, Any] | None) -> JobOptions:
    """Validate caller options into a JobOptions.

    Args:
        options: A JobOptions, a mapping of option values, or None.

    Returns:
        Validated options, defaults for anything absent.

    Raises:
        InvalidInputError: If a recognized option has an invalid value.
    """
    if options is None:
        return JobOptions()
    if isinstance(options, JobOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidInputError(
            f"Options must be a mapping, got {type(options).__name__}"
        )
    # Unset values count as absent
    values = {k: v for k, v in options.items() if v is not None}
    try:
        return JobOptions.model_validate(values)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInputError(f"Invalid job options: {errors}") from e

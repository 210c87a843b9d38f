"""Core utilities package.

This package contains pure utility functions with no external dependencies.
"""

from vjo.core.niceness import (
    MAX_NICE,
    MIN_NICE,
    apply_niceness,
    get_nice_value,
)

__all__ = [
    "MAX_NICE",
    "MIN_NICE",
    "apply_niceness",
    "get_nice_value",
]

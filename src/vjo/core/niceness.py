"""Process priority helpers.

Maps a user-facing priority percentage onto the OS scheduling niceness
range and applies it to a running engine process.
"""

from __future__ import annotations

import logging
import math
import os

logger = logging.getLogger(__name__)

# Lowest OS priority (nicest)
MAX_NICE = 20
# Highest OS priority
MIN_NICE = -20


def get_nice_value(percent: float | None = None) -> int:
    """Map a 0-100 priority percentage to an OS niceness value.

    The mapping is linear and inverted: 0% is the lowest priority (+20)
    and 100% the highest (-20). Values outside 0-100 are clamped.

    Args:
        percent: Priority percentage. None and NaN return the neutral
            niceness 0.

    Returns:
        Niceness in the range [-20, 20].

    Example:
        >>> get_nice_value()
        0
        >>> get_nice_value(75)
        -10
    """
    if percent is None or math.isnan(percent):
        return 0
    percent = max(0.0, min(100.0, float(percent)))
    span = MAX_NICE - MIN_NICE
    return int(round(MAX_NICE - percent * span / 100))


def apply_niceness(pid: int, value: int) -> bool:
    """Set the scheduling niceness of a running process.

    Failures never abort the job: lowering niceness usually needs
    elevated privileges and some platforms have no setpriority.

    Args:
        pid: Process id of the engine process.
        value: Niceness to apply.

    Returns:
        True if the niceness was applied.
    """
    if value == 0:
        return True
    if not hasattr(os, "setpriority"):
        logger.warning("Process priority is not supported on this platform")
        return False
    try:
        os.setpriority(os.PRIO_PROCESS, pid, value)
    except (PermissionError, ProcessLookupError, OSError) as e:
        logger.warning("Could not set niceness %d for pid %d: %s", value, pid, e)
        return False
    logger.debug("Set niceness %d for pid %d", value, pid)
    return True

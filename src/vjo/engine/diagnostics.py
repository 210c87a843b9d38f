"""Engine diagnostic text handling.

ffmpeg reports failures as ``<context>: <reason>`` lines, where the
context is a file name, URL or stream specifier. Only the reason is
stable enough to show to users.
"""

import re

# Lines that carry no diagnostic value when looking for the failure reason
_NOISE_PATTERNS = (
    re.compile(r"^\s*$"),
    re.compile(r"^frame=\s*\d+"),
    re.compile(r"^\s*(built with|configuration:|lib\w+\s+\d)"),
    re.compile(r"^Conversion failed!?$"),
    re.compile(r"^Exiting normally"),
)


def classify_error(raw: str) -> str:
    """Extract a stable user-facing message from engine error text.

    Returns the clause after the last ``": "`` separator, trimmed. Text
    without a separator is returned as is.

    Args:
        raw: Raw diagnostic text.

    Returns:
        Classified message, or ``raw`` unchanged if it has no separator.

    Example:
        >>> classify_error("pipe:0: No such file or directory")
        'No such file or directory'
    """
    _, sep, tail = raw.rpartition(": ")
    if not sep:
        return raw
    return tail.strip()


def last_diagnostic_line(stderr_lines: list[str]) -> str | None:
    """Find the last meaningful line of engine stderr output.

    Progress lines, banner lines and ffmpeg's generic trailer are skipped.

    Args:
        stderr_lines: Lines captured from the engine's stderr.

    Returns:
        The last diagnostic line, or None if none was found.
    """
    for line in reversed(stderr_lines):
        text = line.strip()
        if any(p.match(text) for p in _NOISE_PATTERNS):
            continue
        return text
    return None

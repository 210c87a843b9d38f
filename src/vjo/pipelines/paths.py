"""Input and output location resolution for video jobs.

Sources are ``file://`` URLs (local files) or ``http(s)://`` URLs (remote
resources the engine reads directly). Outputs are written to, in order of
precedence: the ``out_dir`` option, the system temp directory for remote
sources, or the source file's own directory.
"""

from __future__ import annotations

import re
import tempfile
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath
from urllib.parse import unquote, urlparse

from vjo.jobs.exceptions import InvalidInputError
from vjo.jobs.options import JobOptions

SCREENSHOT_SUFFIX = "_preview.png"
CONVERSION_SUFFIX = ".mp4"

REMOTE_SCHEMES = frozenset({"http", "https"})
LOCAL_SCHEME = "file"

_WINDOWS_DRIVE = re.compile(r"^/[A-Za-z]:")


@dataclass(frozen=True)
class SourceLocation:
    """A parsed source URL."""

    url: str
    engine_input: str  # What is passed to the engine: local path or the URL
    stem: str  # Base name without extension
    local_path: Path | None = None

    @property
    def is_remote(self) -> bool:
        return self.local_path is None


@dataclass(frozen=True)
class ResolvedPaths:
    """Input and output locations of one job."""

    input_path: str
    output_path: Path
    is_remote: bool

    @property
    def output_url(self) -> str:
        return to_file_url(self.output_path)


def to_file_url(path: PurePath | str) -> str:
    """Build a ``file://`` URL from an absolute path."""
    posix = PurePath(path).as_posix()
    if not posix.startswith("/"):
        posix = "/" + posix
    return f"file://{posix}"


def parse_source(source_url: str) -> SourceLocation:
    """Parse a source URL.

    Args:
        source_url: ``file://``, ``http://`` or ``https://`` URL.

    Returns:
        Parsed source location.

    Raises:
        InvalidInputError: If the scheme is unsupported or the URL has no
            file name.
    """
    parsed = urlparse(source_url)
    scheme = parsed.scheme.lower()

    if scheme == LOCAL_SCHEME:
        path = unquote(parsed.path)
        if _WINDOWS_DRIVE.match(path):
            path = path[1:]
        elif parsed.netloc and parsed.netloc != "localhost":
            path = f"//{parsed.netloc}{path}"
        local_path = Path(path)
        if not local_path.name:
            raise InvalidInputError(f"Source URL has no file name: {source_url}")
        return SourceLocation(
            url=source_url,
            engine_input=str(local_path),
            stem=local_path.stem,
            local_path=local_path,
        )

    if scheme in REMOTE_SCHEMES:
        name = PurePosixPath(unquote(parsed.path)).name
        if not name:
            raise InvalidInputError(f"Source URL has no file name: {source_url}")
        return SourceLocation(
            url=source_url,
            engine_input=source_url,
            stem=PurePosixPath(name).stem,
        )

    raise InvalidInputError(
        f"Unsupported source URL scheme '{parsed.scheme}': {source_url}"
    )


def resolve_paths(
    source_url: str,
    options: JobOptions | None = None,
    suffix: str = SCREENSHOT_SUFFIX,
) -> ResolvedPaths:
    """Derive input and output locations for a job.

    Args:
        source_url: Source URL of the job.
        options: Job options; only ``out_dir`` is used.
        suffix: Appended to the source stem to form the output file name,
            e.g. ``_preview.png`` or ``.mp4``.

    Returns:
        Resolved input and output paths.

    Raises:
        InvalidInputError: If the source URL is not supported.

    Example:
        >>> resolve_paths("file:///videos/clip.avi").output_url
        'file:///videos/clip_preview.png'
    """
    source = parse_source(source_url)
    options = options or JobOptions()

    if options.out_dir is not None:
        out_dir = options.out_dir
    elif source.is_remote:
        out_dir = Path(tempfile.gettempdir())
    else:
        assert source.local_path is not None
        out_dir = source.local_path.parent

    output_path = out_dir / f"{source.stem}{suffix}"
    # Never write over the source itself
    if source.local_path is not None and output_path == source.local_path:
        base, dot, ext = suffix.rpartition(".")
        if dot:
            output_path = out_dir / f"{source.stem}{base}_converted.{ext}"
        else:
            output_path = out_dir / f"{source.stem}{suffix}_converted"

    return ResolvedPaths(
        input_path=source.engine_input,
        output_path=output_path,
        is_remote=source.is_remote,
    )

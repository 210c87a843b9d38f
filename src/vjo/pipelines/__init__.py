"""Job pipelines: path resolution, codec probing, screenshots, conversion."""

from vjo.pipelines.conversion import FAST_PATH_CODEC, ConversionPipeline
from vjo.pipelines.events import (
    CONVERSION_DONE,
    CONVERSION_ERROR,
    CONVERSION_PROGRESS,
    ConversionHandle,
)
from vjo.pipelines.paths import (
    CONVERSION_SUFFIX,
    SCREENSHOT_SUFFIX,
    ResolvedPaths,
    SourceLocation,
    parse_source,
    resolve_paths,
    to_file_url,
)
from vjo.pipelines.probe import CodecProber, parse_codec_name
from vjo.pipelines.screenshot import ScreenshotPipeline

__all__ = [
    "CONVERSION_DONE",
    "CONVERSION_ERROR",
    "CONVERSION_PROGRESS",
    "CONVERSION_SUFFIX",
    "FAST_PATH_CODEC",
    "SCREENSHOT_SUFFIX",
    "CodecProber",
    "ConversionHandle",
    "ConversionPipeline",
    "ResolvedPaths",
    "ScreenshotPipeline",
    "SourceLocation",
    "parse_codec_name",
    "parse_source",
    "resolve_paths",
    "to_file_url",
]

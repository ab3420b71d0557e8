"""Directory scanning and largest-file selection."""

from reencoder.scanner.orchestrator import (
    DirectoryScanner,
    ScanProgressCallback,
    has_video_extension,
)
from reencoder.scanner.selector import LargestFileSelector, VideoSelection

__all__ = [
    "DirectoryScanner",
    "LargestFileSelector",
    "ScanProgressCallback",
    "VideoSelection",
    "has_video_extension",
]

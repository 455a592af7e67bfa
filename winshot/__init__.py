"""Find an application window, capture it, and compress it into a
size-bounded JPEG data URI."""

from winshot.compressor import EncodedArtifact, compress
from winshot.directory import WindowDescriptor, WindowDirectorySnapshot, snapshot_windows
from winshot.errors import (
    CaptureError,
    EncodingError,
    MalformedRequestError,
    SizeBudgetExceededError,
    WindowNotFoundError,
    WinshotError,
)
from winshot.handler import decode_request, handle_take_screenshot
from winshot.pipeline import ScreenshotRequest, run_off_thread, run_pipeline, take_screenshot
from winshot.resolver import loose_match, resolve
from winshot.settings import DEFAULTS, CompressionConfig, CompressionDefaults

__version__ = "0.1.0"

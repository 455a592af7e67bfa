"""Capture the pixels of one resolved window.

A single call to the window server; no retries. The window may close between
resolution and capture, and that shows up here as a CaptureError.
"""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from winshot.directory import WindowDescriptor
from winshot.errors import CaptureError
from winshot.logs import log_message

try:
    import Quartz
    from Quartz import (
        CGDataProviderCopyData,
        CGImageGetBytesPerRow,
        CGImageGetDataProvider,
        CGImageGetHeight,
        CGImageGetWidth,
        CGRectNull,
        CGWindowListCreateImage,
        kCGWindowImageBoundsIgnoreFraming,
        kCGWindowListOptionIncludingWindow,
    )
except Exception:
    Quartz = None


@dataclass
class RawCapture:
    """RGBA pixel buffer owned by a single pipeline run."""
    image: Image.Image

    def __post_init__(self):
        if self.image.mode != "RGBA":
            self.image = self.image.convert("RGBA")

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


def image_from_bgra(data: bytes, width: int, height: int, bytes_per_row: int) -> Image.Image:
    """Build an RGBA image from a BGRA buffer whose rows may be padded."""
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid image size {width}x{height}")
    if bytes_per_row < width * 4 or len(data) < bytes_per_row * height:
        raise ValueError(
            f"buffer too small: {len(data)} bytes for {width}x{height} (stride {bytes_per_row})"
        )
    return Image.frombuffer("RGBA", (width, height), bytes(data), "raw", "BGRA", bytes_per_row, 1)


def capture(window: WindowDescriptor) -> RawCapture:
    if Quartz is None:
        raise CaptureError("Failed to capture window image: Quartz is not available")
    try:
        cg_image = CGWindowListCreateImage(
            CGRectNull,
            kCGWindowListOptionIncludingWindow,
            window.handle,
            kCGWindowImageBoundsIgnoreFraming,
        )
        if cg_image is None:
            raise CaptureError(
                f"Failed to capture window image: window {window.handle} returned no image "
                "(closed, or screen recording permission missing)"
            )
        width = int(CGImageGetWidth(cg_image))
        height = int(CGImageGetHeight(cg_image))
        bytes_per_row = int(CGImageGetBytesPerRow(cg_image))
        data = CGDataProviderCopyData(CGImageGetDataProvider(cg_image))
        image = image_from_bgra(bytes(data), width, height, bytes_per_row)
    except CaptureError:
        raise
    except Exception as e:
        raise CaptureError(f"Failed to capture window image: {e}") from e

    log_message(f"[WINSHOT] Successfully captured window image: {width}x{height}")
    return RawCapture(image)

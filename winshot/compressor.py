"""Adaptive JPEG compression under a byte budget.

Stages, each conditional on the previous one:

1. One-time downscale to the effective max width (caller's max_width, else
   1920 for wider images), aspect ratio preserved.
2. Lower quality in steps of 10 while over budget, never below the floor.
3. Still over budget: shrink both sides by 0.8 per round at the quality stage
   2 ended on, stopping once width is at or below 800 whether or not the
   budget is met.
4. Reject the result if its base64 text is over the hard ceiling.

All size arithmetic truncates toward zero.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from functools import cached_property
from typing import Union

from PIL import Image

from winshot.capture import RawCapture
from winshot.errors import EncodingError, SizeBudgetExceededError
from winshot.logs import log_message
from winshot.settings import DEFAULTS, CompressionConfig, CompressionDefaults

MIMETYPE = "image/jpeg"
RESAMPLE = Image.Resampling.BILINEAR


@dataclass
class EncodedArtifact:
    data: bytes
    width: int
    height: int
    quality: int
    mimetype: str = MIMETYPE

    @cached_property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mimetype};base64,{self.base64}"

    def __len__(self) -> int:
        return len(self.data)


def effective_max_width(width: int, config: CompressionConfig, defaults: CompressionDefaults = DEFAULTS) -> int:
    if config.max_width is not None:
        return config.max_width
    if width > defaults.max_width:
        log_message(f"[SCREENSHOT] No max width specified, defaulting to {defaults.max_width}px")
        return defaults.max_width
    return width


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        raise EncodingError(f"Failed to encode JPEG: {e}") from e
    return buf.getvalue()


def _to_rgb(image: Union[RawCapture, Image.Image]) -> Image.Image:
    if isinstance(image, RawCapture):
        image = image.image
    # JPEG has no alpha channel.
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def compress(
    image: Union[RawCapture, Image.Image],
    config: CompressionConfig = CompressionConfig(),
    defaults: CompressionDefaults = DEFAULTS,
) -> EncodedArtifact:
    img = _to_rgb(image)
    budget = config.max_size_bytes

    target_width = effective_max_width(img.width, config, defaults)
    if img.width > target_width:
        log_message(
            f"[SCREENSHOT] Resizing from {img.width}x{img.height} to maintain max width of {target_width}"
        )
        height = max(1, int(img.height * (target_width / img.width)))
        img = img.resize((target_width, height), RESAMPLE)

    quality = config.quality
    data = encode_jpeg(img, quality)

    while len(data) > budget and quality > defaults.quality_floor:
        next_quality = max(quality - defaults.quality_step, defaults.quality_floor)
        log_message(
            f"[SCREENSHOT] Output size {len(data)} bytes exceeds max {budget}. "
            f"Reducing quality to {next_quality}"
        )
        quality = next_quality
        data = encode_jpeg(img, quality)

    if len(data) > budget and img.width > defaults.resize_floor_width:
        log_message("[SCREENSHOT] Image still too large after quality reduction. Resizing...")
        while len(data) > budget and img.width > defaults.resize_floor_width:
            new_width = max(1, int(img.width * defaults.shrink_factor))
            new_height = max(1, int(img.height * defaults.shrink_factor))
            log_message(f"[SCREENSHOT] Resizing to {new_width}x{new_height}")
            img = img.resize((new_width, new_height), RESAMPLE)
            # Re-encode at the already reduced quality.
            data = encode_jpeg(img, quality)

    artifact = EncodedArtifact(data=data, width=img.width, height=img.height, quality=quality)
    log_message(
        f"[SCREENSHOT] Final image size: {img.width}x{img.height}, "
        f"data size: {len(data)} bytes, quality: {quality}"
    )

    encoded_len = len(artifact.base64)
    if encoded_len > defaults.max_base64_len:
        raise SizeBudgetExceededError(
            f"Screenshot is still too large: {encoded_len} bytes. Try using a smaller max_width."
        )
    return artifact

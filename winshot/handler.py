"""Turn inbound takeScreenshot payloads into pipeline runs and uniform
response envelopes.

Nothing raised by decoding or the pipeline escapes handle_take_screenshot;
every failure becomes ``{"success": False, "error": ..., "code": ...}``.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from winshot.compressor import EncodedArtifact
from winshot.errors import MalformedRequestError, WinshotError
from winshot.logs import log_message
from winshot.pipeline import ScreenshotRequest, take_screenshot
from winshot.settings import DEFAULTS, CompressionConfig, CompressionDefaults, load_settings

# snake_case name -> accepted camelCase alias
_ALIASES = {
    "window_label": "windowLabel",
    "application_name": "applicationName",
    "quality": "quality",
    "max_width": "maxWidth",
    "max_size_mb": "maxSizeMb",
}


def _invalid(reason: str) -> MalformedRequestError:
    return MalformedRequestError(f"Invalid payload for takeScreenshot: {reason}")


def _field(payload: dict, name: str) -> Any:
    if name in payload:
        return payload[name]
    return payload.get(_ALIASES[name])


def _optional_str(payload: dict, name: str) -> Optional[str]:
    value = _field(payload, name)
    if value is not None and not isinstance(value, str):
        raise _invalid(f"{name} must be a string")
    return value


def _optional_number(payload: dict, name: str, integer: bool) -> Optional[float]:
    value = _field(payload, name)
    if value is None:
        return None
    kinds = (int,) if integer else (int, float)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, kinds):
        kind = "an integer" if integer else "a number"
        raise _invalid(f"{name} must be {kind}")
    # json.loads accepts Infinity and NaN.
    if isinstance(value, float) and not math.isfinite(value):
        raise _invalid(f"{name} must be finite (got {value})")
    return value


def decode_request(
    payload: Any,
    default_window: Optional[str] = None,
    defaults: CompressionDefaults = DEFAULTS,
) -> ScreenshotRequest:
    if default_window is None:
        default_window = load_settings().default_window
    try:
        return _decode(payload, default_window, defaults)
    except MalformedRequestError:
        raise
    except (TypeError, ValueError, OverflowError) as e:
        raise _invalid(str(e)) from e


def _decode(payload: Any, default_window: str, defaults: CompressionDefaults) -> ScreenshotRequest:
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise _invalid(f"expected an object, got {type(payload).__name__}")

    window_label = _optional_str(payload, "window_label")
    application_name = _optional_str(payload, "application_name")
    quality = _optional_number(payload, "quality", integer=True)
    max_width = _optional_number(payload, "max_width", integer=True)
    max_size_mb = _optional_number(payload, "max_size_mb", integer=False)

    if quality is not None and not 1 <= quality <= 100:
        raise _invalid(f"quality must be between 1 and 100 (got {quality})")
    if max_width is not None and max_width <= 0:
        raise _invalid(f"max_width must be positive (got {max_width})")
    if max_size_mb is not None and max_size_mb <= 0:
        raise _invalid(f"max_size_mb must be positive (got {max_size_mb})")

    config = CompressionConfig.from_mb(
        quality=quality,
        max_width=max_width,
        max_size_mb=max_size_mb,
        defaults=defaults,
    )
    if config.max_size_bytes <= 0:
        raise _invalid(f"max_size_mb is too small (got {max_size_mb})")

    return ScreenshotRequest(
        window_label=default_window if window_label is None else window_label,
        application_name=application_name or "",
        config=config,
    )


def success_response(artifact: EncodedArtifact) -> dict:
    return {
        "success": True,
        "data": {
            "data": artifact.data_url,
            "success": True,
            "width": artifact.width,
            "height": artifact.height,
            "quality": artifact.quality,
            "bytes": len(artifact),
        },
        "error": None,
    }


def error_response(err: Exception) -> dict:
    code = err.code if isinstance(err, WinshotError) else "internal_error"
    return {"success": False, "data": None, "error": str(err), "code": code}


async def handle_take_screenshot(
    payload: Any,
    platform=None,
    executor: Optional[ThreadPoolExecutor] = None,
    default_window: Optional[str] = None,
    defaults: CompressionDefaults = DEFAULTS,
) -> dict:
    try:
        request = decode_request(payload, default_window=default_window, defaults=defaults)
    except MalformedRequestError as e:
        log_message(f"[WINSHOT] {e}", "error")
        return error_response(e)

    try:
        artifact = await take_screenshot(request, platform=platform, executor=executor, defaults=defaults)
    except WinshotError as e:
        log_message(f"[WINSHOT] takeScreenshot failed: {e}", "error")
        return error_response(e)
    except Exception as e:
        log_message(f"[WINSHOT] takeScreenshot crashed: {type(e).__name__}: {e}", "error")
        return error_response(e)
    return success_response(artifact)

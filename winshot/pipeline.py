"""Snapshot -> resolve -> capture -> compress, run off the event loop.

Window enumeration and capture are blocking OS calls, so the whole sequence
runs on a worker thread. Each request carries its own ScreenshotRequest
value and owns its snapshot and pixel buffer; nothing is shared between
concurrent requests. In-flight work cannot be cancelled; a caller timeout
only stops waiting.
"""

from __future__ import annotations

import asyncio
import functools
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from winshot import capture as capture_mod
from winshot import directory
from winshot.compressor import EncodedArtifact, compress
from winshot.logs import log_message
from winshot.resolver import resolve_or_raise
from winshot.settings import DEFAULTS, CompressionConfig, CompressionDefaults, load_settings


class QuartzPlatform:
    """Window list and capture backed by the macOS window server."""

    def enumerate(self) -> directory.WindowDirectorySnapshot:
        return directory.snapshot_windows()

    def capture(self, window: directory.WindowDescriptor) -> capture_mod.RawCapture:
        return capture_mod.capture(window)


@dataclass(frozen=True)
class ScreenshotRequest:
    window_label: str = "main"
    application_name: str = ""
    config: CompressionConfig = field(default_factory=CompressionConfig)


def run_pipeline(
    request: ScreenshotRequest,
    platform=None,
    defaults: CompressionDefaults = DEFAULTS,
) -> EncodedArtifact:
    """Run one screenshot synchronously. Raises WinshotError subclasses."""
    platform = platform or QuartzPlatform()

    log_message(
        f"[WINSHOT] Looking for window with title: {request.window_label} "
        f"(app: {request.application_name or '-'})"
    )
    # Enumerate once per request.
    snapshot = platform.enumerate()
    log_message(f"[WINSHOT] Found {len(snapshot)} windows")
    directory.describe_snapshot(snapshot)

    window = resolve_or_raise(snapshot, request.window_label, request.application_name)
    raw = platform.capture(window)
    return compress(raw, request.config, defaults)


_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=load_settings().workers,
                thread_name_prefix="winshot",
            )
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None


async def run_off_thread(
    fn: Callable[..., Any],
    *args,
    executor: Optional[ThreadPoolExecutor] = None,
    **kwargs,
) -> Any:
    """Run a blocking callable on the worker pool and await its result.

    Exceptions raised by fn propagate to the awaiting caller.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor or get_executor(),
        functools.partial(fn, *args, **kwargs),
    )


async def take_screenshot(
    request: ScreenshotRequest,
    platform=None,
    executor: Optional[ThreadPoolExecutor] = None,
    defaults: CompressionDefaults = DEFAULTS,
) -> EncodedArtifact:
    return await run_off_thread(run_pipeline, request, platform, defaults, executor=executor)

"""Window directory: a fresh snapshot of every window the capture subsystem
can see right now.

macOS only (Quartz window list). Nothing is cached between calls; window
state is volatile.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Iterator, Optional

from winshot.errors import CaptureError
from winshot.logs import debug_enabled, log_message

try:
    import Quartz
    from Quartz import (
        CGWindowListCopyWindowInfo,
        kCGNullWindowID,
        kCGWindowListExcludeDesktopElements,
        kCGWindowListOptionAll,
    )
except Exception:
    Quartz = None


@dataclass(frozen=True)
class WindowDescriptor:
    """Read-only view of one window at enumeration time.

    title / application_name are None when the platform would not report
    them. is_minimized is None when minimized state could not be determined.
    """
    handle: int
    title: Optional[str]
    application_name: Optional[str]
    is_minimized: Optional[bool]
    bounds: Optional[dict] = None  # {x, y, w, h}
    layer: int = 0

    def to_dict(self) -> dict:
        return {
            "handle": self.handle,
            "title": self.title,
            "applicationName": self.application_name,
            "isMinimized": self.is_minimized,
            "bounds": self.bounds,
            "layer": self.layer,
        }


class WindowDirectorySnapshot(Sequence):
    """Ordered windows in platform enumeration order.

    Enumeration order is the only tie-breaker used by the resolver and is not
    stable across snapshots.
    """

    def __init__(self, windows: Sequence[WindowDescriptor] = ()):
        self._windows = tuple(windows)

    def __getitem__(self, index):
        return self._windows[index]

    def __len__(self) -> int:
        return len(self._windows)

    def __iter__(self) -> Iterator[WindowDescriptor]:
        return iter(self._windows)

    def __repr__(self) -> str:
        return f"WindowDirectorySnapshot({len(self._windows)} windows)"


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def descriptor_from_info(info) -> Optional[WindowDescriptor]:
    """Convert one CGWindowListCopyWindowInfo entry. Returns None for entries
    without a usable window number."""
    wid = info.get("kCGWindowNumber")
    try:
        wid = int(wid)
    except (TypeError, ValueError):
        return None
    if wid <= 0:
        return None

    # Quartz omits kCGWindowIsOnscreen for off-screen (minimized) windows.
    is_minimized = not bool(info.get("kCGWindowIsOnscreen", False))

    bounds = None
    raw_bounds = info.get("kCGWindowBounds")
    if raw_bounds:
        bounds = {
            "x": float(raw_bounds.get("X", 0)),
            "y": float(raw_bounds.get("Y", 0)),
            "w": float(raw_bounds.get("Width", 0)),
            "h": float(raw_bounds.get("Height", 0)),
        }

    try:
        layer = int(info.get("kCGWindowLayer", 0))
    except (TypeError, ValueError):
        layer = 0

    return WindowDescriptor(
        handle=wid,
        title=_optional_str(info.get("kCGWindowName")),
        application_name=_optional_str(info.get("kCGWindowOwnerName")),
        is_minimized=is_minimized,
        bounds=bounds,
        layer=layer,
    )


def snapshot_windows() -> WindowDirectorySnapshot:
    """Enumerate top-level (layer 0) windows via Quartz."""
    if Quartz is None:
        raise CaptureError("Failed to get window list: Quartz is not available (pip3 install pyobjc-framework-Quartz)")
    try:
        window_list = CGWindowListCopyWindowInfo(
            kCGWindowListOptionAll | kCGWindowListExcludeDesktopElements,
            kCGNullWindowID,
        )
    except Exception as e:
        raise CaptureError(f"Failed to get window list: {e}") from e
    if window_list is None:
        raise CaptureError("Failed to get window list: window server returned nothing")

    windows = []
    for info in window_list:
        desc = descriptor_from_info(info)
        if desc is None or desc.layer != 0:
            continue
        windows.append(desc)
    return WindowDirectorySnapshot(windows)


def describe_snapshot(snapshot: WindowDirectorySnapshot) -> None:
    """Log every window not known to be minimized (debug only)."""
    if not debug_enabled():
        return
    log_message("[WINSHOT] ============= ALL WINDOWS =============", "debug")
    for w in snapshot:
        if w.is_minimized is False:
            log_message(f"[WINSHOT] Window: title='{w.title}', app_name='{w.application_name}'", "debug")
    log_message("[WINSHOT] ======================================", "debug")

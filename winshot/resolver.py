"""Pick one window out of a directory snapshot from loose hints.

Two passes, first match wins:

1. Application name (only when a hint is given). Windows known to be
   minimized are skipped; windows with unknown state are still eligible.
2. Title. Windows known to be minimized AND windows with unknown state are
   skipped. Exact and substring matches rank the same; enumeration order
   decides.

Both passes compare through loose_match so they stay consistent.
"""

from __future__ import annotations

from typing import Optional

from winshot.directory import WindowDescriptor, WindowDirectorySnapshot
from winshot.errors import WindowNotFoundError
from winshot.logs import log_message

NOT_FOUND_MESSAGE = (
    "Window not found using any detection method. "
    "Please ensure the window is visible and not minimized."
)


def loose_match(candidate: Optional[str], target: str, allow_substring: bool = True) -> bool:
    """Case-insensitive equality, or containment of target in candidate."""
    if candidate is None:
        return False
    candidate_lower = candidate.lower()
    target_lower = target.lower()
    if candidate_lower == target_lower:
        return True
    return allow_substring and target_lower in candidate_lower


def _match_application(snapshot: WindowDirectorySnapshot, hint: str) -> Optional[WindowDescriptor]:
    for window in snapshot:
        if window.is_minimized:
            continue
        if loose_match(window.application_name, hint):
            log_message(f"[WINSHOT] Found window by app name: '{window.application_name}'")
            return window
    return None


def _match_title(snapshot: WindowDirectorySnapshot, desired_title: str) -> Optional[WindowDescriptor]:
    for window in snapshot:
        # Unknown minimized state counts as hidden here.
        if window.is_minimized is None or window.is_minimized:
            continue
        log_message(f"[WINSHOT] Checking title: '{window.title}' vs '{desired_title}'", "debug")
        if loose_match(window.title, desired_title):
            log_message(f"[WINSHOT] Found window by title match: '{window.title}'")
            return window
    return None


def resolve(
    snapshot: WindowDirectorySnapshot,
    desired_title: str,
    application_name_hint: Optional[str] = "",
) -> Optional[WindowDescriptor]:
    hint = (application_name_hint or "").strip()
    if hint:
        window = _match_application(snapshot, hint)
        if window is not None:
            return window

    log_message(f"[WINSHOT] Searching by title, looking for: '{desired_title}'", "debug")
    window = _match_title(snapshot, desired_title)
    if window is None:
        log_message(f"[WINSHOT] No matching window found for '{desired_title}'", "error")
    return window


def resolve_or_raise(
    snapshot: WindowDirectorySnapshot,
    desired_title: str,
    application_name_hint: Optional[str] = "",
) -> WindowDescriptor:
    window = resolve(snapshot, desired_title, application_name_hint)
    if window is None:
        raise WindowNotFoundError(NOT_FOUND_MESSAGE)
    return window

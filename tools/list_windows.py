#!/usr/bin/env python3
"""List the windows the capture subsystem can see, in enumeration order.

Usage: tools/list_windows.py [--app NAME] [--json]
"""

import argparse
import json
import sys

from winshot.directory import snapshot_windows
from winshot.errors import CaptureError


def _state(is_minimized):
    if is_minimized is None:
        return "unknown"
    return "minimized" if is_minimized else "visible"


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--app", default="", help="Only show windows whose owner contains NAME")
    ap.add_argument("--json", action="store_true", help="Print JSON instead of tab-separated rows")
    args = ap.parse_args()

    try:
        snapshot = snapshot_windows()
    except CaptureError as e:
        print(f"Failed to list windows: {e}", file=sys.stderr)
        return 1

    app = args.app.lower()
    windows = [w for w in snapshot if not app or app in (w.application_name or "").lower()]

    if args.json:
        print(json.dumps([w.to_dict() for w in windows], indent=2, ensure_ascii=False))
        return 0
    for w in windows:
        print(f"{w.handle}\t{w.application_name or ''}\t{w.title or ''}\t{_state(w.is_minimized)}\t{w.bounds}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

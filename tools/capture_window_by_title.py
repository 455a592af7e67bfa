#!/usr/bin/env python3
"""Capture a window by (partial) title or owning app and save it as JPEG.

Usage:
    tools/capture_window_by_title.py <title_contains> <out.jpg> [--app iTerm2]
        [--quality 85] [--max-width 1280] [--max-size-mb 2]
"""

import argparse
import sys
from pathlib import Path

from winshot.errors import WinshotError
from winshot.pipeline import ScreenshotRequest, run_pipeline
from winshot.settings import CompressionConfig


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("title_contains")
    ap.add_argument("out")
    ap.add_argument("--app", default="", help="Application name hint (tried before the title)")
    ap.add_argument("--quality", type=int, default=None)
    ap.add_argument("--max-width", type=int, default=None)
    ap.add_argument("--max-size-mb", type=float, default=None)
    args = ap.parse_args()

    # NOTE: macOS Screen Recording permission is required for window capture.
    request = ScreenshotRequest(
        window_label=args.title_contains,
        application_name=args.app,
        config=CompressionConfig.from_mb(
            quality=args.quality,
            max_width=args.max_width,
            max_size_mb=args.max_size_mb,
        ),
    )
    try:
        artifact = run_pipeline(request)
    except WinshotError as e:
        print(f"Capture failed ({e.code}): {e}", file=sys.stderr)
        return 1

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(artifact.data)
    print(f"Saved: {out_path} ({artifact.width}x{artifact.height}, {len(artifact)} bytes, quality {artifact.quality})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

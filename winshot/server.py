#!/usr/bin/env python3
"""WebSocket command server exposing the screenshot pipeline.

Protocol (one JSON object per message):

    {"version": 1, "type": "cmd", "id": "cmd-1",
     "target": "capture", "action": "takeScreenshot",
     "payload": {"window_label": "main", "max_width": 1280}}

Every command gets exactly one ack carrying the same id plus the response
envelope (success/data/error). Supported commands:

    capture.takeScreenshot   resolve + capture + compress one window
    capture.listWindows      current window snapshot
    orchestrator.getState    server settings and uptime

Usage:
    python3 -m winshot.server --host 127.0.0.1 --port 8766
"""

from __future__ import annotations

import argparse
import asyncio
import json
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import websockets

from winshot.errors import WinshotError
from winshot.handler import error_response, handle_take_screenshot
from winshot.logs import log_message, set_debug, set_state_dir
from winshot.pipeline import QuartzPlatform, run_off_thread
from winshot.settings import Settings, load_settings

PROTOCOL_VERSION = 1


class CommandServer:
    def __init__(self, settings: Optional[Settings] = None, platform=None, executor=None):
        self.settings = settings or load_settings()
        self.platform = platform or QuartzPlatform()
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.workers, thread_name_prefix="winshot"
        )
        self.started_at = time.time()
        self.requests = 0

    def _ack(self, msg_id: Any, envelope: dict) -> dict:
        out = {"version": PROTOCOL_VERSION, "type": "ack", "id": msg_id}
        out.update(envelope)
        return out

    async def dispatch(self, raw: str) -> dict:
        """Handle one raw message and return the ack to send back."""
        try:
            msg = json.loads(raw)
        except (TypeError, ValueError) as e:
            return self._ack(None, {"success": False, "data": None,
                                    "error": f"invalid JSON: {e}", "code": "bad_request"})
        if not isinstance(msg, dict) or msg.get("type") != "cmd":
            msg_id = msg.get("id") if isinstance(msg, dict) else None
            return self._ack(msg_id, {"success": False, "data": None,
                                      "error": "expected a cmd message", "code": "bad_request"})

        msg_id = msg.get("id")
        target = msg.get("target")
        action = msg.get("action")
        payload = msg.get("payload")
        self.requests += 1
        log_message(f"[SERVER] {msg_id}: {target}.{action}", "debug")

        if target == "capture" and action == "takeScreenshot":
            envelope = await handle_take_screenshot(
                payload,
                platform=self.platform,
                executor=self.executor,
                default_window=self.settings.default_window,
                defaults=self.settings.compression,
            )
        elif target == "capture" and action == "listWindows":
            envelope = await self._list_windows()
        elif target == "orchestrator" and action == "getState":
            envelope = {"success": True, "data": self.state(), "error": None}
        else:
            envelope = {"success": False, "data": None,
                        "error": f"unknown command: {target}.{action}", "code": "unknown_action"}
        return self._ack(msg_id, envelope)

    async def _list_windows(self) -> dict:
        try:
            snapshot = await run_off_thread(self.platform.enumerate, executor=self.executor)
        except WinshotError as e:
            log_message(f"[SERVER] listWindows failed: {e}", "error")
            return error_response(e)
        except Exception as e:
            log_message(f"[SERVER] listWindows crashed: {type(e).__name__}: {e}", "error")
            return error_response(e)
        return {"success": True, "data": {"windows": [w.to_dict() for w in snapshot]}, "error": None}

    def state(self) -> dict:
        return {
            "host": self.settings.host,
            "port": self.settings.port,
            "defaultWindow": self.settings.default_window,
            "workers": self.settings.workers,
            "uptimeSec": round(time.time() - self.started_at, 1),
            "requests": self.requests,
        }

    async def handle_connection(self, ws) -> None:
        log_message(f"[SERVER] Client connected: {ws.remote_address}")
        try:
            async for raw in ws:
                reply = await self.dispatch(raw)
                await ws.send(json.dumps(reply))
        except websockets.ConnectionClosed:
            pass
        finally:
            log_message(f"[SERVER] Client disconnected: {ws.remote_address}")

    async def serve_forever(self) -> None:
        async with websockets.serve(self.handle_connection, self.settings.host, self.settings.port):
            log_message(f"[SERVER] Listening on ws://{self.settings.host}:{self.settings.port}")
            await asyncio.Future()


def main() -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="winshot screenshot server")
    parser.add_argument("--host", default=settings.host, help="Bind address (default: env WINSHOT_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=settings.port, help="Port (default: env WINSHOT_PORT or 8766)")
    parser.add_argument("--workers", type=int, default=settings.workers, help="Capture worker threads")
    parser.add_argument("--default-window", default=settings.default_window,
                        help="Window title used when a request has no window_label")
    parser.add_argument("--state-dir", default=settings.state_dir, help="Directory for winshot.log")
    parser.add_argument("--debug", action="store_true", default=settings.debug, help="Verbose logging")
    args = parser.parse_args()

    settings.host = args.host
    settings.port = args.port
    settings.workers = max(1, args.workers)
    settings.default_window = args.default_window
    settings.state_dir = args.state_dir
    settings.debug = args.debug
    set_state_dir(settings.state_dir)
    set_debug(settings.debug)

    server = CommandServer(settings)
    try:
        asyncio.run(server.serve_forever())
    except KeyboardInterrupt:
        log_message("[SERVER] Stopped (interrupted)")
    finally:
        server.executor.shutdown(wait=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

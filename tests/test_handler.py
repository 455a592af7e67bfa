"""Request decoding and response envelopes."""

import base64
import dataclasses

import pytest

from winshot.errors import MalformedRequestError
from winshot.handler import decode_request, error_response, handle_take_screenshot
from winshot.settings import DEFAULTS


class TestDecodeRequest:
    def test_defaults(self):
        req = decode_request({}, default_window="main")
        assert req.window_label == "main"
        assert req.application_name == ""
        assert req.config.quality == 85
        assert req.config.max_width is None
        assert req.config.max_size_bytes == 2 * 1024 * 1024

    def test_none_payload(self):
        assert decode_request(None, default_window="main").window_label == "main"

    def test_default_window_from_env(self, monkeypatch):
        monkeypatch.setenv("WINSHOT_DEFAULT_WINDOW", "Host Console")
        assert decode_request({}).window_label == "Host Console"

    def test_snake_case(self):
        req = decode_request({
            "window_label": "Editor",
            "application_name": "Code",
            "quality": 60,
            "max_width": 1280,
            "max_size_mb": 0.5,
        })
        assert req.window_label == "Editor"
        assert req.application_name == "Code"
        assert req.config.quality == 60
        assert req.config.max_width == 1280
        assert req.config.max_size_bytes == 512 * 1024

    def test_camel_case_aliases(self):
        req = decode_request({"windowLabel": "a", "applicationName": "b", "maxWidth": 10, "maxSizeMb": 1})
        assert (req.window_label, req.application_name) == ("a", "b")
        assert req.config.max_width == 10
        assert req.config.max_size_bytes == 1024 * 1024

    def test_empty_label_kept(self):
        assert decode_request({"window_label": ""}, default_window="main").window_label == ""

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            "take it",
            {"window_label": 5},
            {"application_name": ["x"]},
            {"quality": 0},
            {"quality": 101},
            {"quality": 80.5},
            {"quality": True},
            {"max_width": 0},
            {"max_width": "1280"},
            {"max_size_mb": -1},
            {"max_size_mb": 1e-12},
            {"max_size_mb": float("inf")},
            {"max_size_mb": float("-inf")},
            {"max_size_mb": float("nan")},
            {"max_size_mb": 1e308},
        ],
    )
    def test_malformed(self, payload):
        with pytest.raises(MalformedRequestError, match="Invalid payload for takeScreenshot"):
            decode_request(payload, default_window="main")


def test_error_response_for_unexpected_exception():
    env = error_response(ValueError("boom"))
    assert env == {"success": False, "data": None, "error": "boom", "code": "internal_error"}


@pytest.mark.asyncio
async def test_success_envelope(fake_platform, executor):
    env = await handle_take_screenshot({"window_label": "main"}, platform=fake_platform, executor=executor)
    assert env["success"] is True
    assert env["error"] is None
    data = env["data"]
    assert data["success"] is True
    assert data["data"].startswith("data:image/jpeg;base64,")
    assert data["bytes"] == len(base64.b64decode(data["data"].split(",", 1)[1]))
    assert (data["width"], data["height"]) == (640, 480)


@pytest.mark.asyncio
async def test_malformed_request_runs_nothing(fake_platform, executor):
    env = await handle_take_screenshot({"quality": 500}, platform=fake_platform, executor=executor)
    assert env["success"] is False
    assert env["code"] == "malformed_request"
    assert fake_platform.enumerate_calls == 0


@pytest.mark.asyncio
async def test_window_not_found_envelope(fake_platform, executor):
    env = await handle_take_screenshot({"window_label": "Slack"}, platform=fake_platform, executor=executor)
    assert env["success"] is False
    assert env["data"] is None
    assert env["code"] == "window_not_found"
    assert "not minimized" in env["error"]


@pytest.mark.asyncio
async def test_capture_error_envelope(platform_factory, window_factory, executor):
    platform = platform_factory(windows=[window_factory(1, "main")], capture_error="Failed to capture window image: gone")
    env = await handle_take_screenshot({}, platform=platform, executor=executor, default_window="main")
    assert env["code"] == "capture_failed"
    assert env["error"] == "Failed to capture window image: gone"


@pytest.mark.asyncio
async def test_size_budget_envelope(platform_factory, window_factory, noise, executor):
    platform = platform_factory(windows=[window_factory(1, "main")], image=noise(300, 200))
    tight = dataclasses.replace(DEFAULTS, max_base64_len=100)
    env = await handle_take_screenshot({}, platform=platform, executor=executor, default_window="main", defaults=tight)
    assert env["code"] == "size_budget_exceeded"
    assert "Try using a smaller max_width" in env["error"]


@pytest.mark.asyncio
async def test_unexpected_error_is_contained(executor):
    class Broken:
        def enumerate(self):
            raise KeyError("window server")

    env = await handle_take_screenshot({}, platform=Broken(), executor=executor, default_window="main")
    assert env["success"] is False
    assert env["code"] == "internal_error"

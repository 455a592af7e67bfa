"""End-to-end pipeline over a fake platform, and the worker-thread bridge."""

import threading

import pytest
from PIL import Image

from winshot.errors import CaptureError, WindowNotFoundError
from winshot.pipeline import ScreenshotRequest, run_off_thread, run_pipeline, take_screenshot
from winshot.settings import CompressionConfig


def test_pipeline_resolves_captures_and_compresses(fake_platform):
    artifact = run_pipeline(ScreenshotRequest(window_label="MAIN"), fake_platform)
    assert fake_platform.enumerate_calls == 1
    assert [w.handle for w in fake_platform.captured] == [2]
    assert (artifact.width, artifact.height) == (640, 480)
    assert artifact.data_url.startswith("data:image/jpeg;base64,")


def test_pipeline_prefers_application_hint(fake_platform):
    run_pipeline(ScreenshotRequest(window_label="main", application_name="textedit"), fake_platform)
    assert [w.handle for w in fake_platform.captured] == [1]


def test_pipeline_applies_config(platform_factory, window_factory):
    platform = platform_factory(
        windows=[window_factory(9, "Big", "Viewer")],
        image=Image.new("RGBA", (3000, 1500), (1, 2, 3, 255)),
    )
    request = ScreenshotRequest(window_label="big", config=CompressionConfig(quality=60, max_width=1000))
    artifact = run_pipeline(request, platform)
    assert (artifact.width, artifact.height) == (1000, 500)
    assert artifact.quality == 60


def test_window_not_found_skips_capture(fake_platform):
    with pytest.raises(WindowNotFoundError):
        run_pipeline(ScreenshotRequest(window_label="Slack"), fake_platform)
    assert fake_platform.captured == []


def test_capture_failure_propagates(platform_factory, window_factory):
    platform = platform_factory(windows=[window_factory(1, "main")], capture_error="window closed")
    with pytest.raises(CaptureError, match="window closed"):
        run_pipeline(ScreenshotRequest(), platform)


@pytest.mark.asyncio
async def test_run_off_thread_uses_worker(executor):
    caller = threading.get_ident()
    worker = await run_off_thread(threading.get_ident, executor=executor)
    assert worker != caller


@pytest.mark.asyncio
async def test_run_off_thread_passes_arguments(executor):
    assert await run_off_thread(pow, 2, 10, executor=executor) == 1024
    assert await run_off_thread(int, "ff", base=16, executor=executor) == 255


@pytest.mark.asyncio
async def test_run_off_thread_propagates_errors(executor):
    def fail():
        raise CaptureError("gone")

    with pytest.raises(CaptureError, match="gone"):
        await run_off_thread(fail, executor=executor)


@pytest.mark.asyncio
async def test_take_screenshot(fake_platform, executor):
    artifact = await take_screenshot(ScreenshotRequest(), platform=fake_platform, executor=executor)
    assert artifact.width == 640
    assert fake_platform.captured[0].handle == 2


@pytest.mark.asyncio
async def test_take_screenshot_default_pool(fake_platform):
    artifact = await take_screenshot(ScreenshotRequest(), platform=fake_platform)
    assert artifact.height == 480

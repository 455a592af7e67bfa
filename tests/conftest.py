"""
Pytest configuration and shared fixtures for winshot tests.

Tests never touch the window server: FakePlatform serves scripted window
snapshots and Pillow images in place of Quartz.
"""

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from PIL import Image

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from winshot.capture import RawCapture  # noqa: E402
from winshot.directory import WindowDescriptor, WindowDirectorySnapshot  # noqa: E402
from winshot.errors import CaptureError  # noqa: E402


def make_window(handle, title="", app="", minimized=False):
    return WindowDescriptor(handle=handle, title=title, application_name=app, is_minimized=minimized)


def noise_image(width, height):
    """Random RGB pixels; compresses badly, which is the point."""
    return Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))


class FakePlatform:
    def __init__(self, windows=(), image=None, capture_error=None):
        self.windows = list(windows)
        self.image = image if image is not None else Image.new("RGBA", (640, 480), (20, 40, 60, 255))
        self.capture_error = capture_error
        self.enumerate_calls = 0
        self.captured = []

    def enumerate(self):
        self.enumerate_calls += 1
        return WindowDirectorySnapshot(self.windows)

    def capture(self, window):
        self.captured.append(window)
        if self.capture_error:
            raise CaptureError(self.capture_error)
        return RawCapture(self.image)


@pytest.fixture
def window_factory():
    return make_window


@pytest.fixture
def noise():
    return noise_image


@pytest.fixture
def fake_platform():
    return FakePlatform(
        windows=[
            make_window(1, title="Untitled", app="TextEdit"),
            make_window(2, title="main", app="host_test_app"),
        ]
    )


@pytest.fixture
def platform_factory():
    return FakePlatform


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="winshot-test")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep log output out of the user's state dir."""
    monkeypatch.setattr("winshot.logs.LOG_FILE", None)

"""
conftest.py

Test configuration for dailywall tests.

Defines Pytest fixtures for supplying test data to tests across the entire test suite. Fixtures
used within only a single module are defined directly in that module.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from dailywall.bing_handler import DailyPicture
from dailywall.errors import DaemonError
from dailywall.state import SchedulerState


class RecordingHyprpaper:
    """
    Stand-in for dailywall.hyprpaper.Hyprpaper that records every command in `calls` as a tuple,
    e.g. ("preload", path) or ("wallpaper", monitor, path). Commands listed in `failing` raise
    DaemonError instead.
    """

    def __init__(self):
        self.calls = []
        self.failing = set()

    def _record(self, *call):
        self.calls.append(call)
        if call[0] in self.failing or call[:2] in self.failing:
            raise DaemonError(f"refused {call}")
        return "ok"

    def preload(self, path: Path) -> str:
        return self._record("preload", Path(path))

    def set_wallpaper(self, monitor: str, path: Path) -> str:
        return self._record("wallpaper", monitor, Path(path))

    def unload(self, path: Path) -> str:
        return self._record("unload", Path(path))


@pytest.fixture
def now() -> datetime:
    """Mid-morning on 2024-01-15, after the 07:00 change-over."""

    return datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def pictures_dir(tmp_path) -> Path:
    directory = tmp_path / "Bing Wallpapers"
    directory.mkdir()
    return directory


@pytest.fixture
def fallback_picture(tmp_path) -> Path:
    path = tmp_path / "bliss.jpg"
    path.write_bytes(b"fallback")
    return path


@pytest.fixture
def state(fallback_picture) -> SchedulerState:
    return SchedulerState(fallback_picture)


@pytest.fixture
def hyprpaper() -> RecordingHyprpaper:
    return RecordingHyprpaper()


@pytest.fixture
def image_record() -> dict:
    """One element of the "images" list as returned by Bing's HPImageArchive endpoint."""

    return {
        "startdate": "20240115",
        "fullstartdate": "202401150800",
        "enddate": "20240116",
        "url": "/th?id=OHR.Foo_EN-US123_1920x1080.jpg&rf=LaDigue_1920x1080.jpg",
        "urlbase": "/th?id=OHR.Foo_EN-US123",
        "title": "Foo",
    }


@pytest.fixture
def picture(image_record) -> DailyPicture:
    return DailyPicture.from_json(image_record)

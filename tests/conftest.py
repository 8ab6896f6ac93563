"""Shared fixtures for the video studio tests."""

from pathlib import Path

import pytest

from video_studio.app import create_app
from video_studio.common.models.video import Video
from video_studio.config import VideoStudioConfig
from video_studio.services import LocalStorage, VideoStorage


@pytest.fixture
def memory_storage():
    return VideoStorage(LocalStorage())


@pytest.fixture
def file_storage(tmp_path: Path):
    return VideoStorage(LocalStorage(tmp_path / "local.storage.json"))


@pytest.fixture
def make_video():
    def _make(video_id="video_1", status="processing", **overrides):
        data = {
            "id": video_id,
            "prompt": "A serene mountain landscape at sunrise",
            "status": status,
            "created_at": "2024-05-01T10:00:00.000Z",
            "aspect_ratio": "landscape",
            "quality": "standard",
            "duration": 5,
        }
        data.update(overrides)
        return Video(**data)

    return _make


@pytest.fixture
def studio_config(tmp_path: Path, monkeypatch):
    for key in ("VIDEO_STUDIO_API_TOKEN", "VIDEO_STUDIO_CUSTOMER_ID", "VIDEO_STUDIO_REQUEST_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    return VideoStudioConfig.load(data_dir=tmp_path / "data")


@pytest.fixture
def app(studio_config):
    flask_app = create_app(studio_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()

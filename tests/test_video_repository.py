"""Unit tests for VideoStorage."""

import json

import pytest

from video_studio.common.models.video import GenerationStats, VideoSettings
from video_studio.services.local_storage import LocalStorage
from video_studio.services.video_repository import STORAGE_KEYS, VideoStorage


@pytest.fixture(params=["memory", "file"])
def storage(request, memory_storage, file_storage):
    return memory_storage if request.param == "memory" else file_storage


class TestVideos:
    def test_empty_store(self, storage):
        assert storage.get_videos() == []
        assert storage.get_video("nope") is None

    def test_new_videos_are_prepended(self, storage, make_video):
        storage.save_video(make_video("first"))
        storage.save_video(make_video("second"))

        assert [v.id for v in storage.get_videos()] == ["second", "first"]

    def test_save_replaces_in_place(self, storage, make_video):
        """Updating an existing id keeps its position."""
        storage.save_video(make_video("a"))
        storage.save_video(make_video("b"))
        storage.save_video(make_video("c"))
        storage.save_video(make_video("b", status="completed", video_url="https://cdn/b.mp4"))

        videos = storage.get_videos()
        assert [v.id for v in videos] == ["c", "b", "a"]
        assert videos[1].status == "completed"

    def test_save_is_idempotent(self, storage, make_video):
        video = make_video("same")
        storage.save_video(video)
        storage.save_video(video)

        videos = storage.get_videos()
        assert len(videos) == 1
        assert videos[0] == video

    def test_get_video_returns_equal_record(self, storage, make_video):
        video = make_video("v1", status="completed", completed_at="2024-05-01T10:00:10.000Z", file_size=10, style="noir")
        storage.save_video(video)

        assert storage.get_video("v1") == video

    def test_delete(self, storage, make_video):
        storage.save_video(make_video("a"))
        storage.save_video(make_video("b"))
        storage.delete_video("a")

        assert [v.id for v in storage.get_videos()] == ["b"]

    def test_delete_missing_is_noop(self, storage, make_video):
        storage.save_video(make_video("a"))
        before = storage.get_videos()

        storage.delete_video("missing")

        assert storage.get_videos() == before

    def test_unreadable_blob_reads_as_empty(self):
        local = LocalStorage()
        local.set_item(STORAGE_KEYS["videos"], "{broken")

        assert VideoStorage(local).get_videos() == []


class TestStatsRecompute:
    def test_stats_recomputed_on_save(self, storage, make_video):
        """A completed video 10 s after creation counts 10 s of processing."""
        storage.save_video(make_video("a", status="completed", completed_at="2024-05-01T10:00:10.000Z"))

        stats = storage.get_stats()
        assert stats.total_generated == 1
        assert stats.total_processing_time >= 10
        assert stats.success_rate == 100
        assert stats.last_generated == "2024-05-01T10:00:00.000Z"

    def test_default_stats(self, storage):
        assert storage.get_stats() == GenerationStats()


class TestSettings:
    def test_defaults_when_absent(self, storage):
        assert storage.get_settings() == VideoSettings()

    def test_partial_update_merges(self, storage):
        storage.save_settings({"default_duration": 12})
        storage.save_settings({"auto_download": True})

        settings = storage.get_settings()
        assert settings.default_duration == 12
        assert settings.auto_download is True
        assert settings.default_quality == "standard"

    def test_stored_partial_merged_over_defaults(self):
        local = LocalStorage()
        local.set_item(STORAGE_KEYS["settings"], json.dumps({"defaultQuality": "premium"}))

        settings = VideoStorage(local).get_settings()
        assert settings.default_quality == "premium"
        assert settings.default_duration == 5

    def test_unknown_keys_ignored(self, storage):
        storage.save_settings({"theme": "dark", "default_quality": "high"})

        assert storage.get_settings().default_quality == "high"


class TestExportImport:
    def test_round_trip_restores_everything(self, storage, make_video):
        storage.save_video(make_video("a", status="completed", completed_at="2024-05-01T10:00:30.000Z", file_size=5))
        storage.save_video(make_video("b"))
        storage.save_settings({"default_aspect_ratio": "square"})
        videos, settings, stats = storage.get_videos(), storage.get_settings(), storage.get_stats()

        blob = storage.export_data()
        storage.clear_all_data()
        assert storage.get_videos() == []

        assert storage.import_data(blob) is True
        assert storage.get_videos() == videos
        assert storage.get_settings() == settings
        assert storage.get_stats() == stats

    def test_export_shape(self, storage):
        data = json.loads(storage.export_data())

        assert set(data) == {"videos", "settings", "stats", "exportedAt"}

    def test_missing_sections_left_untouched(self, storage, make_video):
        storage.save_video(make_video("keep"))

        assert storage.import_data(json.dumps({"settings": {"defaultDuration": 9}})) is True
        assert [v.id for v in storage.get_videos()] == ["keep"]
        assert storage.get_settings().default_duration == 9

    def test_empty_sections_overwrite_existing(self, storage, make_video):
        """An empty list or object is still a present section and replaces what was stored."""
        storage.save_video(make_video("video_old", status="completed", completed_at="2024-05-01T10:00:30.000Z"))
        storage.save_settings({"default_duration": 20})

        assert storage.import_data(json.dumps({"videos": [], "settings": {}, "stats": {}})) is True
        assert storage.get_videos() == []
        assert storage.get_settings().default_duration == 5
        assert storage.get_stats().total_generated == 0

    @pytest.mark.parametrize("blob", ["not json", "[1, 2]", json.dumps({"videos": {"a": 1}})])
    def test_invalid_import_returns_false(self, storage, make_video, blob):
        storage.save_video(make_video("keep"))

        assert storage.import_data(blob) is False
        assert [v.id for v in storage.get_videos()] == ["keep"]

    def test_clear_all_data(self, storage, make_video):
        storage.save_video(make_video("a"))
        storage.save_settings({"default_duration": 20})

        storage.clear_all_data()

        assert storage.get_videos() == []
        assert storage.get_settings() == VideoSettings()
        assert storage.get_stats() == GenerationStats()

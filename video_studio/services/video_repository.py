"""本機影片記錄、設定與統計儲存庫。"""

from __future__ import annotations

import json
import logging
from dataclasses import fields, replace
from typing import Any, Dict, List, Mapping, Optional

from ..common.models.video import (
    GenerationStats,
    Video,
    VideoSettings,
    format_timestamp,
    utc_now,
)
from ..common.services.logging import log_event
from .local_storage import LocalStorage
from .stats import compute_stats

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "videos": "ai_video_app_videos",
    "settings": "ai_video_app_settings",
    "stats": "ai_video_app_stats",
}


class VideoStorage:
    """管理影片記錄、設定與統計的儲存。

    Every operation is best-effort: storage or (de)serialisation errors are
    logged and the caller gets empty/default data or a silent no-op.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    # --- videos ---

    def get_videos(self) -> List[Video]:
        """列出影片記錄（新到舊）。"""
        try:
            return [Video.from_dict(item) for item in self._load_videos()]
        except Exception as e:
            self._log_failure("load_videos", e)
            return []

    def get_video(self, video_id: str) -> Optional[Video]:
        for video in self.get_videos():
            if video.id == video_id:
                return video
        return None

    def save_video(self, video: Video) -> None:
        """新增或更新影片記錄，並重新計算統計。"""
        try:
            with self._storage.lock:
                records = self._load_videos()
                for i, record in enumerate(records):
                    if record.get("id") == video.id:
                        records[i] = video.to_dict()
                        break
                else:
                    records.insert(0, video.to_dict())
                self._storage.set_item(STORAGE_KEYS["videos"], json.dumps(records, ensure_ascii=False))
                self._update_stats(video)
        except Exception as e:
            self._log_failure("save_video", e, video_id=video.id)

    def delete_video(self, video_id: str) -> None:
        try:
            with self._storage.lock:
                records = self._load_videos()
                remaining = [r for r in records if r.get("id") != video_id]
                if len(remaining) == len(records):
                    return
                self._storage.set_item(STORAGE_KEYS["videos"], json.dumps(remaining, ensure_ascii=False))
        except Exception as e:
            self._log_failure("delete_video", e, video_id=video_id)

    # --- settings ---

    def get_settings(self) -> VideoSettings:
        defaults = VideoSettings()
        try:
            stored = self._load_json(STORAGE_KEYS["settings"])
            if not isinstance(stored, dict):
                return defaults
            merged = defaults.to_dict()
            merged.update(stored)
            return VideoSettings.from_dict(merged)
        except Exception as e:
            self._log_failure("load_settings", e)
            return defaults

    def save_settings(self, changes: Mapping[str, Any]) -> None:
        """以淺層合併方式更新設定；``changes`` 使用屬性名稱（snake_case）。"""
        known = {f.name for f in fields(VideoSettings)}
        updates = {k: v for k, v in (changes or {}).items() if k in known}
        ignored = sorted(set(changes or {}) - known)
        if ignored:
            logger.warning("Ignoring unknown settings: %s", ", ".join(ignored))
        try:
            with self._storage.lock:
                updated = replace(self.get_settings(), **updates)
                self._storage.set_item(STORAGE_KEYS["settings"], json.dumps(updated.to_dict(), ensure_ascii=False))
        except Exception as e:
            self._log_failure("save_settings", e)

    # --- stats ---

    def get_stats(self) -> GenerationStats:
        try:
            stored = self._load_json(STORAGE_KEYS["stats"])
            if isinstance(stored, dict):
                return GenerationStats.from_dict(stored)
        except Exception as e:
            self._log_failure("load_stats", e)
        return GenerationStats()

    def _update_stats(self, video: Video) -> None:
        try:
            stats = compute_stats(self.get_videos(), trigger=video)
            self._storage.set_item(STORAGE_KEYS["stats"], json.dumps(stats.to_dict()))
        except Exception as e:
            self._log_failure("update_stats", e)

    # --- bulk ---

    def clear_all_data(self) -> None:
        try:
            with self._storage.lock:
                for key in STORAGE_KEYS.values():
                    self._storage.remove_item(key)
        except Exception as e:
            self._log_failure("clear_all_data", e)

    def export_data(self) -> str:
        data = {
            "videos": [v.to_dict() for v in self.get_videos()],
            "settings": self.get_settings().to_dict(),
            "stats": self.get_stats().to_dict(),
            "exportedAt": format_timestamp(utc_now()),
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_data(self, json_data: str) -> bool:
        """還原匯出資料；每個集合獨立寫入，缺少的集合保持不變。"""
        try:
            data = json.loads(json_data)
            if not isinstance(data, dict):
                raise ValueError("Import data must be a JSON object")
            checks = {"videos": list, "settings": dict, "stats": dict}
            for name, expected in checks.items():
                if data.get(name) is not None and not isinstance(data[name], expected):
                    raise ValueError(f"Import data has an invalid '{name}' section")

            with self._storage.lock:
                for name in ("videos", "settings", "stats"):
                    if data.get(name) is not None:
                        self._storage.set_item(STORAGE_KEYS[name], json.dumps(data[name], ensure_ascii=False))
            return True
        except Exception as e:
            self._log_failure("import_data", e)
            return False

    def _load_videos(self) -> List[Dict[str, Any]]:
        data = self._load_json(STORAGE_KEYS["videos"])
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]
        return []

    def _load_json(self, key: str) -> Any:
        raw = self._storage.get_item(key)
        if not raw:
            return None
        return json.loads(raw)

    @staticmethod
    def _log_failure(operation: str, exc: Exception, **context) -> None:
        logger.error("[VideoStorage] %s failed: %s", operation, exc)
        log_event("error", "storage_failure", operation=operation, error=str(exc), **context)

"""影片生成流程：送出請求、寫入本機儲存並輪詢至完成。"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..common.models.video import (
    ASPECT_RATIOS,
    QUALITIES,
    STATUS_COMPLETED,
    STATUS_FAILED,
    Video,
    VideoGenerationRequest,
    VideoGenerationResponse,
    format_timestamp,
    utc_now,
)
from ..common.services.logging import log_event
from ..common.utils.validators import clamp_duration, ensure_choice
from .status_poller import DEFAULT_POLL_INTERVAL, StatusPoller
from .video_repository import VideoStorage

logger = logging.getLogger(__name__)


class VideoGenerationService:
    """Generation workflow on top of an API client and the local store.

    ``api`` is anything with ``generate_video(request, system_prompt=...)``,
    ``check_video_status(video_id)`` and ``download_video(url, destination)``:
    either the upstream ``VideoGenerationClient`` or a ``StudioApiClient``.
    """

    def __init__(
        self,
        storage: VideoStorage,
        api,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        download_dir: Optional[Path] = None,
    ) -> None:
        self._storage = storage
        self._api = api
        self._poll_interval = poll_interval
        self._download_dir = Path(download_dir) if download_dir else None
        self._pollers: Dict[str, StatusPoller] = {}
        self._lock = threading.Lock()

    @property
    def active_generations(self) -> List[str]:
        with self._lock:
            return [vid for vid, poller in self._pollers.items() if poller.is_running]

    def submit(
        self,
        prompt: str,
        *,
        duration: Optional[int] = None,
        aspect_ratio: Optional[str] = None,
        quality: Optional[str] = None,
        style: Optional[str] = None,
        on_completed: Optional[Callable[[VideoGenerationResponse], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_progress: Optional[Callable[[VideoGenerationResponse], None]] = None,
    ) -> Video:
        """啟動影片生成並開始輪詢。

        Missing options fall back to the stored settings and the duration is
        clamped to 1-30 s. Raises ``ValueError`` on an empty prompt or an
        unknown option; errors raised by the API client propagate.
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValueError("Video prompt is required")

        settings = self._storage.get_settings()
        request = VideoGenerationRequest(
            prompt=prompt,
            duration=clamp_duration(duration, default=settings.default_duration),
            aspect_ratio=ensure_choice(aspect_ratio, ASPECT_RATIOS, "aspect_ratio", settings.default_aspect_ratio),
            quality=ensure_choice(quality, QUALITIES, "quality", settings.default_quality),
            style=(style or "").strip() or None,
        )
        response = self._api.generate_video(request, system_prompt=settings.system_prompt)
        video = Video.from_generation(request, response)
        self._storage.save_video(video)

        if response.status == STATUS_FAILED:
            message = response.error or "Video generation failed"
            logger.warning("Generation %s rejected: %s", video.id, message)
            if on_error is not None:
                on_error(message)
            return video

        poller = StatusPoller(
            video.id,
            self._api.check_video_status,
            on_completed=lambda result: self._finished(poller, lambda: self._handle_completed(result, on_completed)),
            on_error=lambda message: self._finished(poller, lambda: self._handle_error(video.id, message, on_error)),
            interval=self._poll_interval,
            on_progress=on_progress,
        )
        with self._lock:
            previous = self._pollers.pop(video.id, None)
            self._pollers[video.id] = poller
        if previous is not None:
            previous.stop()
        poller.start()
        return video

    def get_poller(self, video_id: str) -> Optional[StatusPoller]:
        with self._lock:
            return self._pollers.get(video_id)

    def wait(self, video_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the generation stops polling; ``True`` once nothing is left running."""
        poller = self.get_poller(video_id)
        if poller is None:
            return True
        return poller.wait(timeout)

    def cancel(self, video_id: str) -> bool:
        with self._lock:
            poller = self._pollers.pop(video_id, None)
        if poller is None:
            return False
        poller.stop()
        return True

    def shutdown(self) -> None:
        """Stop every poller; no status check runs after this returns."""
        with self._lock:
            pollers = list(self._pollers.values())
            self._pollers.clear()
        for poller in pollers:
            poller.stop()

    def __enter__(self) -> "VideoGenerationService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def _finished(self, poller: StatusPoller, action: Callable[[], None]) -> None:
        """Run the terminal handler, then drop the poller unless a newer one replaced it."""
        try:
            action()
        finally:
            with self._lock:
                if self._pollers.get(poller.video_id) is poller:
                    del self._pollers[poller.video_id]

    def _handle_completed(
        self,
        result: VideoGenerationResponse,
        callback: Optional[Callable[[VideoGenerationResponse], None]],
    ) -> None:
        existing = self._storage.get_video(result.id)
        if existing is not None and not existing.is_terminal:
            updated = replace(
                existing,
                status=STATUS_COMPLETED,
                video_url=result.video_url,
                thumbnail_url=result.thumbnail_url,
                completed_at=result.completed_at or format_timestamp(utc_now()),
            )
            updated = self._maybe_download(updated)
            self._storage.save_video(updated)
        log_event("info", "generation_completed", video_id=result.id)
        if callback is not None:
            callback(result)

    def _handle_error(self, video_id: str, message: str, callback: Optional[Callable[[str], None]]) -> None:
        existing = self._storage.get_video(video_id)
        if existing is not None and not existing.is_terminal:
            self._storage.save_video(replace(existing, status=STATUS_FAILED, error=message))
        log_event("warning", "generation_failed", video_id=video_id, error=message)
        if callback is not None:
            callback(message)

    def _maybe_download(self, video: Video) -> Video:
        if not video.video_url or self._download_dir is None:
            return video
        if not self._storage.get_settings().auto_download:
            return video
        destination = self._download_dir / f"{video.id}.mp4"
        try:
            size = self._api.download_video(video.video_url, destination)
        except Exception as exc:
            logger.warning("Auto-download failed for %s: %s", video.id, exc)
            return video
        return replace(video, file_size=size)

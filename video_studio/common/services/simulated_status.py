"""Wall-clock progress simulation used in place of a real job-status query."""

from __future__ import annotations

import time
from typing import Callable

from ..models.video import (
    STATUS_COMPLETED,
    STATUS_PROCESSING,
    VideoGenerationResponse,
    timestamp_from_ms,
)


class SimulatedStatusBackend:
    """Test double for the upstream status endpoint.

    The upstream chat-completions API never reports job progress, so progress
    is derived from the wall clock: every ``WINDOW_MS`` the simulated job runs
    from 0 to 100 percent. The result only depends on the clock, not on the
    video identifier, so repeated calls within one tick agree.
    """

    WINDOW_MS = 300_000
    MS_PER_PERCENT = WINDOW_MS / 100
    PLACEHOLDER_VIDEO_URL = "https://placehold.co/1920x1080.mp4?text=Generated+Video+{video_id}"
    PLACEHOLDER_THUMBNAIL_URL = "https://placehold.co/1920x1080?text=Video+Thumbnail+{video_id}"

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def status_for(self, video_id: str) -> VideoGenerationResponse:
        now_ms = self._clock() * 1000
        progress = min(100.0, (now_ms % self.WINDOW_MS) / self.MS_PER_PERCENT)
        rounded = int(progress + 0.5)

        if rounded >= 100:
            return VideoGenerationResponse(
                id=video_id,
                status=STATUS_COMPLETED,
                video_url=self.PLACEHOLDER_VIDEO_URL.format(video_id=video_id),
                thumbnail_url=self.PLACEHOLDER_THUMBNAIL_URL.format(video_id=video_id),
                progress=100,
                created_at=timestamp_from_ms(now_ms - self.WINDOW_MS),
                completed_at=timestamp_from_ms(now_ms),
            )

        return VideoGenerationResponse(
            id=video_id,
            status=STATUS_PROCESSING,
            progress=rounded,
            estimated_time_remaining=int((100 - progress) * 3 + 0.5),
            created_at=timestamp_from_ms(now_ms - progress * self.MS_PER_PERCENT),
        )

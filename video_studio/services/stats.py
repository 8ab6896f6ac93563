"""Derived generation statistics."""

from __future__ import annotations

from typing import Optional, Sequence

from ..common.models.video import STATUS_COMPLETED, GenerationStats, Video, parse_timestamp


def processing_seconds(video: Video) -> float:
    if not video.created_at or not video.completed_at:
        return 0.0
    elapsed = parse_timestamp(video.completed_at) - parse_timestamp(video.created_at)
    return max(0.0, elapsed.total_seconds())


def compute_stats(videos: Sequence[Video], trigger: Optional[Video] = None) -> GenerationStats:
    """Recompute every aggregate from the full collection."""
    total = len(videos)
    completed = sum(1 for v in videos if v.status == STATUS_COMPLETED)
    return GenerationStats(
        total_generated=total,
        total_processing_time=sum(processing_seconds(v) for v in videos),
        success_rate=(completed / total) * 100 if total > 0 else 0,
        storage_used=sum(v.file_size or 0 for v in videos),
        last_generated=trigger.created_at if trigger is not None else None,
    )

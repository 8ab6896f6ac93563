"""影片生成工作室服務模組入口。"""

from .local_storage import LocalStorage
from .stats import compute_stats
from .status_poller import PollerState, StatusPoller
from .studio_client import StudioApiClient, StudioApiError
from .video_repository import VideoStorage
from .video_service import VideoGenerationService

__all__ = [
    "LocalStorage",
    "compute_stats",
    "PollerState",
    "StatusPoller",
    "StudioApiClient",
    "StudioApiError",
    "VideoStorage",
    "VideoGenerationService",
]

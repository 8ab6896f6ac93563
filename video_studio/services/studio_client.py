"""HTTP client for the video studio API routes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from ..common.models.video import VideoGenerationRequest, VideoGenerationResponse
from ..common.services.video_api import download_video

logger = logging.getLogger(__name__)


class StudioApiError(Exception):
    """Non-2xx answer from the studio API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StudioApiClient:
    """Calls ``/api/generate-video``, ``/api/video-status`` and ``/api/videos``."""

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def generate_video(
        self,
        request: VideoGenerationRequest,
        system_prompt: Optional[str] = None,
    ) -> VideoGenerationResponse:
        body = request.to_dict()
        if system_prompt:
            body["systemPrompt"] = system_prompt
        data = self._request("POST", "/api/generate-video", "Video generation failed", json=body)
        return VideoGenerationResponse.from_dict(data)

    def check_video_status(self, video_id: str) -> VideoGenerationResponse:
        data = self._request("GET", "/api/video-status", "Failed to check status", params={"id": video_id})
        return VideoGenerationResponse.from_dict(data)

    def download_info(self, video_id: str) -> Dict[str, Any]:
        return self._request(
            "GET", "/api/videos", "Video download failed", params={"action": "download", "id": video_id}
        )

    def delete_video(self, video_id: str) -> Dict[str, Any]:
        return self._request("DELETE", "/api/videos", "Video deletion failed", params={"id": video_id})

    def download_video(self, video_url: str, destination: Path) -> int:
        return download_video(video_url, destination, timeout=self.timeout)

    def _request(self, method: str, path: str, default_error: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        response = requests.request(method, url, timeout=self.timeout, **kwargs)
        if not response.ok:
            message = default_error
            try:
                message = response.json().get("error") or default_error
            except (ValueError, AttributeError):
                logger.debug("Non-JSON error body from %s: %s", url, response.text[:200])
            raise StudioApiError(message, status_code=response.status_code)
        return response.json()

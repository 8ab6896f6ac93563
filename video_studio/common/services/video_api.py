"""
Video Generation API client
Talks to a chat-completions style endpoint that fronts the video model.
Generation and status calls never raise; failures come back as ``failed`` records.
"""
import logging
import random
import string
import time
from pathlib import Path
from typing import Dict, Optional

import requests

from ..models.video import (
    DEFAULT_SYSTEM_PROMPT,
    STATUS_FAILED,
    STATUS_PROCESSING,
    VideoGenerationRequest,
    VideoGenerationResponse,
    format_timestamp,
    utc_now,
)
from .logging import log_event
from .simulated_status import SimulatedStatusBackend

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_video_id() -> str:
    """``video_<epoch ms>_<9 base-36 chars>``; collisions are possible but unlikely."""
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"video_{int(time.time() * 1000)}_{suffix}"


def download_video(video_url: str, destination: Path, timeout: Optional[float] = None) -> int:
    """Stream ``video_url`` into ``destination`` and return the number of bytes written."""
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    response = requests.get(video_url, stream=True, timeout=timeout)
    if response.status_code != 200:
        raise RuntimeError(f"Failed to download video: HTTP {response.status_code}")

    written = 0
    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=64 * 1024):
            if chunk:
                f.write(chunk)
                written += len(chunk)
    logger.info("Video saved to %s (%d bytes)", destination, written)
    return written


class VideoGenerationClient:
    """
    Video generation API 整合：
    - 以 chat-completions 請求（system + user 訊息）送出生成需求
    - 狀態查詢目前交給 status backend（預設為 SimulatedStatusBackend）
    - system prompt 屬於 client 實例，可於每次呼叫覆寫
    """

    DEFAULT_ENDPOINT = "https://oi-server.onrender.com/chat/completions"
    DEFAULT_MODEL = "replicate/google/veo-3"
    DEFAULT_ESTIMATED_SECONDS = 300

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        customer_id: Optional[str] = None,
        api_token: Optional[str] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        timeout: Optional[float] = None,
        status_backend=None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.customer_id = customer_id
        self.api_token = api_token
        self.system_prompt = system_prompt
        self.timeout = timeout
        self.status_backend = status_backend or SimulatedStatusBackend()

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_token}" if self.api_token else "",
        }
        if self.customer_id:
            headers["customerId"] = self.customer_id
        return headers

    @staticmethod
    def build_enhanced_prompt(request: VideoGenerationRequest) -> str:
        lines = [
            f"Generate a video: {request.prompt}",
            "",
            "Technical Requirements:",
            f"- Duration: {request.duration} seconds",
            f"- Aspect Ratio: {request.aspect_ratio}",
            f"- Quality: {request.quality}",
        ]
        if request.style:
            lines.append(f"- Style: {request.style}")
        lines += [
            "",
            "Cinematic Guidelines:",
            "- Ensure smooth motion and professional transitions",
            "- Maintain visual coherence throughout the video",
            "- Focus on engaging visual storytelling",
            "- Create compelling and appropriate content",
        ]
        return "\n".join(lines)

    def generate_video(
        self,
        request: VideoGenerationRequest,
        system_prompt: Optional[str] = None,
    ) -> VideoGenerationResponse:
        """
        Submit one generation request.

        Args:
            request: Already validated request (see ``normalize_generation_request``)
            system_prompt: Overrides ``self.system_prompt`` for this call only

        Returns:
            A ``processing`` record with a fresh id, or a ``failed`` record with the error
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt or self.system_prompt},
                {"role": "user", "content": self.build_enhanced_prompt(request)},
            ],
        }
        logger.debug("Calling %s with model=%s duration=%ss", self.endpoint, self.model, request.duration)

        try:
            response = requests.post(
                self.endpoint,
                headers=self._get_headers(),
                json=payload,
                timeout=self.timeout,
            )
            if not response.ok:
                raise RuntimeError(f"Video generation failed: {response.status_code} {response.reason or ''}".rstrip())

            result = response.json()
            logger.debug("AI API response: %s", result)
        except requests.exceptions.Timeout:
            return self._failed("Video generation request timed out")
        except Exception as exc:
            return self._failed(str(exc) or "Unknown error occurred")

        video_id = generate_video_id()
        log_event("info", "generation_accepted", video_id=video_id, model=self.model)
        return VideoGenerationResponse(
            id=video_id,
            status=STATUS_PROCESSING,
            progress=0,
            estimated_time_remaining=self.DEFAULT_ESTIMATED_SECONDS,
            created_at=format_timestamp(utc_now()),
        )

    def check_video_status(self, video_id: str) -> VideoGenerationResponse:
        try:
            result = self.status_backend.status_for(video_id)
        except Exception as exc:
            logger.error("Video status check error for %s: %s", video_id, exc)
            return VideoGenerationResponse(
                id=video_id,
                status=STATUS_FAILED,
                error=str(exc) or "Status check failed",
                created_at=format_timestamp(utc_now()),
            )
        logger.debug("Poll %s: status=%s progress=%s", video_id, result.status, result.progress)
        return result

    def download_video(self, video_url: str, destination: Path) -> int:
        return download_video(video_url, destination, timeout=self.timeout)

    def _failed(self, message: str) -> VideoGenerationResponse:
        video_id = generate_video_id()
        logger.error("Video generation error: %s", message)
        log_event("error", "generation_failed", video_id=video_id, error=message)
        return VideoGenerationResponse(
            id=video_id,
            status=STATUS_FAILED,
            error=message,
            created_at=format_timestamp(utc_now()),
        )

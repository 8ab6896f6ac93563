"""Video generation records stored locally and returned by the API."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

VIDEO_STATUSES = (STATUS_PENDING, STATUS_PROCESSING, STATUS_COMPLETED, STATUS_FAILED)
TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_FAILED})

ASPECT_RATIOS = ("landscape", "portrait", "square")
QUALITIES = ("standard", "high", "premium")

DEFAULT_SYSTEM_PROMPT = """You are an expert video generation assistant. Generate high-quality videos based on user prompts.

Guidelines:
- Create visually compelling and coherent video content
- Ensure smooth transitions and professional quality
- Follow the specified duration, aspect ratio, and style requirements
- Generate content that is appropriate and engaging
- Focus on visual storytelling and cinematic quality

Respond only with the video generation request, no additional text."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_from_ms(epoch_ms: float) -> str:
    return format_timestamp(datetime.fromtimestamp(0, timezone.utc) + timedelta(milliseconds=epoch_ms))


def is_terminal(status: Optional[str]) -> bool:
    return status in TERMINAL_STATUSES


class _WireRecord:
    """camelCase <-> snake_case mapping shared by every stored record."""

    # attribute name -> wire key
    _WIRE_KEYS: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            data[self._WIRE_KEYS.get(f.name, f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        reverse = {wire: attr for attr, wire in cls._WIRE_KEYS.items()}
        names = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        kwargs = {}
        for key, value in (data or {}).items():
            attr = reverse.get(key, key)
            if attr in names:
                kwargs[attr] = value
        return cls(**kwargs)


@dataclass
class VideoGenerationRequest(_WireRecord):
    """Normalised generation request handed to the generation client."""

    prompt: str
    duration: Union[int, float] = 5
    aspect_ratio: str = "landscape"
    quality: str = "standard"
    style: Optional[str] = None

    _WIRE_KEYS = {"aspect_ratio": "aspectRatio"}


@dataclass
class VideoGenerationResponse(_WireRecord):
    """Current lifecycle state of one generation, as reported by the API."""

    id: str
    status: str
    created_at: str
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    error: Optional[str] = None
    progress: Optional[float] = None
    estimated_time_remaining: Optional[int] = None
    completed_at: Optional[str] = None

    _WIRE_KEYS = {
        "created_at": "createdAt",
        "video_url": "videoUrl",
        "thumbnail_url": "thumbnailUrl",
        "estimated_time_remaining": "estimatedTimeRemaining",
        "completed_at": "completedAt",
    }

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)


@dataclass
class Video(_WireRecord):
    """A generated (or in-flight) video kept in local storage."""

    id: str
    prompt: str
    status: str
    created_at: str
    aspect_ratio: str = "landscape"
    quality: str = "standard"
    duration: Optional[Union[int, float]] = None
    style: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    completed_at: Optional[str] = None
    file_size: Optional[int] = None
    error: Optional[str] = None

    _WIRE_KEYS = {
        "created_at": "createdAt",
        "aspect_ratio": "aspectRatio",
        "video_url": "videoUrl",
        "thumbnail_url": "thumbnailUrl",
        "completed_at": "completedAt",
        "file_size": "fileSize",
    }

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @classmethod
    def from_generation(cls, request: VideoGenerationRequest, response: VideoGenerationResponse) -> "Video":
        return cls(
            id=response.id,
            prompt=request.prompt,
            status=response.status,
            created_at=response.created_at,
            aspect_ratio=request.aspect_ratio,
            quality=request.quality,
            duration=request.duration,
            style=request.style,
            video_url=response.video_url,
            thumbnail_url=response.thumbnail_url,
            completed_at=response.completed_at,
            error=response.error,
        )


@dataclass
class VideoSettings(_WireRecord):
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    default_duration: int = 5
    default_aspect_ratio: str = "landscape"
    default_quality: str = "standard"
    # declared only; nothing limits concurrent generations
    max_concurrent_generations: int = 3
    auto_download: bool = False

    _WIRE_KEYS = {
        "system_prompt": "systemPrompt",
        "default_duration": "defaultDuration",
        "default_aspect_ratio": "defaultAspectRatio",
        "default_quality": "defaultQuality",
        "max_concurrent_generations": "maxConcurrentGenerations",
        "auto_download": "autoDownload",
    }


@dataclass
class GenerationStats(_WireRecord):
    total_generated: int = 0
    total_processing_time: float = 0
    success_rate: float = 0
    storage_used: int = 0
    last_generated: Optional[str] = None

    _WIRE_KEYS = {
        "total_generated": "totalGenerated",
        "total_processing_time": "totalProcessingTime",
        "success_rate": "successRate",
        "storage_used": "storageUsed",
        "last_generated": "lastGenerated",
    }

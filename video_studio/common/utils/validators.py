import math
from typing import Any, Dict, Optional, Union

from ..models.video import ASPECT_RATIOS, QUALITIES, VideoGenerationRequest

MAX_PROMPT_LENGTH = 2000
MIN_DURATION = 1
MAX_DURATION = 30
DEFAULT_DURATION = 5


def clamp_duration(value: Any, default: int = DEFAULT_DURATION) -> Union[int, float]:
    """Clamp into [1, 30] seconds; missing or 0 means the default.

    Fractions survive clamping (0.5 -> 1, 2.7 -> 2.7); whole numbers come back as int.
    """
    if value is None or value == "" or value == 0:
        return default
    if isinstance(value, bool):
        raise ValueError("duration must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError("duration must be a number")
    if not math.isfinite(number):
        raise ValueError("duration must be a finite number")
    if number == 0:
        return default
    number = min(max(number, float(MIN_DURATION)), float(MAX_DURATION))
    return int(number) if number.is_integer() else number


def ensure_choice(value: Optional[str], choices, field: str, default: str) -> str:
    if value is None or value == "":
        return default
    if value not in choices:
        raise ValueError(f"{field} must be one of: {', '.join(choices)}")
    return value


def normalize_generation_request(payload: Dict[str, Any]) -> VideoGenerationRequest:
    """Validate a raw request body and fill in defaults.

    Raises ``ValueError`` with a user-facing message when the body is unusable.
    """
    prompt = payload.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValueError("Video prompt is required")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ValueError(f"Prompt is too long. Please limit to {MAX_PROMPT_LENGTH} characters.")

    style = payload.get("style")
    if style is not None and not isinstance(style, str):
        raise ValueError("style must be a string")

    return VideoGenerationRequest(
        prompt=prompt.strip(),
        duration=clamp_duration(payload.get("duration")),
        aspect_ratio=ensure_choice(payload.get("aspectRatio"), ASPECT_RATIOS, "aspectRatio", "landscape"),
        quality=ensure_choice(payload.get("quality"), QUALITIES, "quality", "standard"),
        style=(style or "").strip() or None,
    )

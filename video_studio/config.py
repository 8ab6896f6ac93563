"""影片生成工作室設定模組。"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .common.models.video import DEFAULT_SYSTEM_PROMPT
from .common.services.video_api import VideoGenerationClient

logger = logging.getLogger(__name__)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_log_level(value: Optional[str]) -> str:
    level = (value or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {value}")
    return level


def validate_positive_float(value: Any, field: str, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number")
    if number < 0:
        raise ValueError(f"{field} must be >= 0")
    return number


@dataclass
class VideoStudioConfig:
    """封裝影片生成工作室的設定值。"""

    secret_key: str
    log_level: str
    data_dir: Path
    origin: str
    api_endpoint: str
    api_model: str
    customer_id: Optional[str]
    api_token: Optional[str]
    request_timeout: Optional[float]
    poll_interval: float
    base_url: str
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    download_dir: Optional[Path] = None

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @property
    def storage_file(self) -> Path:
        return self.data_dir / f"{self.origin}.storage.json"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "VideoStudioConfig":
        """從 .env、環境變數與 settings.json 建構設定（settings.json 優先）。"""

        load_dotenv()

        root = Path(data_dir or os.getenv("VIDEO_STUDIO_DATA_DIR") or Path.cwd() / "data")
        root.mkdir(parents=True, exist_ok=True)
        s = _load_settings_file(root / "settings.json")

        def pick(key: str, default: Any = None) -> Any:
            value = s.get(key)
            if value is None or value == "":
                value = os.getenv(key)
            return default if value is None or value == "" else value

        timeout = validate_positive_float(pick("VIDEO_STUDIO_REQUEST_TIMEOUT"), "VIDEO_STUDIO_REQUEST_TIMEOUT", 60.0)
        poll_interval = validate_positive_float(pick("VIDEO_STUDIO_POLL_INTERVAL"), "VIDEO_STUDIO_POLL_INTERVAL", 3.0)
        if poll_interval == 0:
            raise ValueError("VIDEO_STUDIO_POLL_INTERVAL must be > 0")
        download_dir = pick("VIDEO_STUDIO_DOWNLOAD_DIR")

        return cls(
            secret_key=pick("VIDEO_STUDIO_SECRET_KEY", "video-studio-dev"),
            log_level=validate_log_level(pick("VIDEO_STUDIO_LOG_LEVEL")),
            data_dir=root,
            origin=pick("VIDEO_STUDIO_ORIGIN", "local"),
            api_endpoint=pick("VIDEO_STUDIO_API_ENDPOINT", VideoGenerationClient.DEFAULT_ENDPOINT),
            api_model=pick("VIDEO_STUDIO_MODEL", VideoGenerationClient.DEFAULT_MODEL),
            customer_id=pick("VIDEO_STUDIO_CUSTOMER_ID"),
            api_token=pick("VIDEO_STUDIO_API_TOKEN"),
            # 0 disables the timeout
            request_timeout=timeout or None,
            poll_interval=poll_interval,
            base_url=str(pick("VIDEO_STUDIO_BASE_URL", "http://127.0.0.1:6055")).rstrip("/"),
            system_prompt=pick("VIDEO_STUDIO_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
            download_dir=Path(download_dir) if download_dir else None,
        )


def _load_settings_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("讀取 %s 失敗: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("%s 內容不是物件，已忽略", path)
        return {}
    return data

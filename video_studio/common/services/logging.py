import json
import logging
from datetime import datetime, timezone

_event_logger = logging.getLogger("video_studio.events")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_event(level: str, event: str, **fields) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level.lower(),
        "event": event,
    }
    payload.update(fields or {})
    try:
        message = json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        message = repr(payload)
    _event_logger.log(_LEVELS.get(level.lower(), logging.INFO), message)

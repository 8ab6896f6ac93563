"""Origin-scoped key-value store holding text blobs."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional


class LocalStorage:
    """A localStorage-like store: string keys, string values, one origin per file.

    With ``data_file=None`` the store lives in memory only. ``lock`` is
    re-entrant and must be held around read-modify-write sequences.
    """

    def __init__(self, data_file: Optional[Path] = None, origin: str = "local") -> None:
        self._data_file = Path(data_file) if data_file is not None else None
        self._memory: Dict[str, str] = {}
        self.origin = origin
        self.lock = threading.RLock()

    @property
    def data_file(self) -> Optional[Path]:
        return self._data_file

    def get_item(self, key: str) -> Optional[str]:
        with self.lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("LocalStorage values must be strings")
        with self.lock:
            data = self._load()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self.lock:
            data = self._load()
            if key in data:
                del data[key]
                self._write(data)

    def keys(self) -> List[str]:
        with self.lock:
            return list(self._load().keys())

    def _load(self) -> Dict[str, str]:
        if self._data_file is None:
            return dict(self._memory)
        if not self._data_file.exists():
            return {}
        text = self._data_file.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Storage file is corrupted: {self._data_file}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Storage file has unexpected content: {self._data_file}")
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        if self._data_file is None:
            self._memory = dict(data)
            return
        self._data_file.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, ensure_ascii=False, indent=2)
        self._data_file.write_text(content + "\n", encoding="utf-8")

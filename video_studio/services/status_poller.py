"""影片生成狀態輪詢器。"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from ..common.models.video import STATUS_COMPLETED, STATUS_FAILED, VideoGenerationResponse
from ..common.services.logging import log_event

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0


class PollerState(str, Enum):
    INITIALIZING = "initializing"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TERMINAL_STATES = {PollerState.COMPLETED, PollerState.FAILED, PollerState.CANCELLED}


class StatusPoller:
    """Polls one generation until it reaches a terminal status.

    One check runs immediately on ``start()``, then one every ``interval``
    seconds on a background thread. Checks never overlap: the next tick is
    scheduled only after the previous check has returned. ``on_completed`` or
    ``on_error`` fires at most once, and nothing fires after ``stop()``.
    Use as a context manager to guarantee the timer is released.
    """

    def __init__(
        self,
        video_id: str,
        check_status: Callable[[str], VideoGenerationResponse],
        on_completed: Callable[[VideoGenerationResponse], None],
        on_error: Callable[[str], None],
        interval: float = DEFAULT_POLL_INTERVAL,
        on_progress: Optional[Callable[[VideoGenerationResponse], None]] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.video_id = video_id
        self.interval = interval
        self._check_status = check_status
        self._on_completed = on_completed
        self._on_error = on_error
        self._on_progress = on_progress

        self._state = PollerState.INITIALIZING
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.check_count = 0
        self.progress: Optional[float] = None
        self.last_response: Optional[VideoGenerationResponse] = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "StatusPoller":
        if self._thread is not None:
            raise RuntimeError(f"Poller for {self.video_id} already started")
        self._thread = threading.Thread(
            target=self._run,
            name=f"status-poller-{self.video_id}",
            daemon=True,
        )
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancel polling and wait for the timer thread to exit."""
        self._stop_event.set()
        with self._state_lock:
            if self._state not in _TERMINAL_STATES:
                self._state = PollerState.CANCELLED
                logger.debug("Polling cancelled for %s", self.video_id)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until polling ends; returns ``True`` if it has ended."""
        if self._thread is None:
            return False
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __enter__(self) -> "StatusPoller":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _run(self) -> None:
        with self._state_lock:
            if self._state is PollerState.INITIALIZING:
                self._state = PollerState.POLLING
        try:
            while not self._stop_event.is_set():
                if self._poll_once():
                    break
                if self._stop_event.wait(self.interval):
                    break
        finally:
            self._stop_event.set()

    def _poll_once(self) -> bool:
        """Run one check; returns ``True`` once polling must end."""
        self.check_count += 1
        try:
            response = self._check_status(self.video_id)
        except Exception as exc:
            logger.warning("Status check error for %s: %s", self.video_id, exc)
            self._finish(PollerState.FAILED, self._on_error, str(exc) or "Unknown error occurred")
            return True

        if self._stop_event.is_set():
            return True

        self.last_response = response
        if response.progress is not None:
            self.progress = response.progress

        if response.status == STATUS_COMPLETED:
            self._finish(PollerState.COMPLETED, self._on_completed, response)
            return True
        if response.status == STATUS_FAILED:
            self._finish(PollerState.FAILED, self._on_error, response.error or "Video generation failed")
            return True

        if self._on_progress is not None:
            self._invoke(self._on_progress, response)
        return False

    def _finish(self, state: PollerState, callback: Callable, argument) -> None:
        with self._state_lock:
            if self._state in _TERMINAL_STATES:
                return
            self._state = state
        self._stop_event.set()
        log_event("info", "poll_finished", video_id=self.video_id, state=state.value, checks=self.check_count)
        self._invoke(callback, argument)

    def _invoke(self, callback: Callable, argument) -> None:
        try:
            callback(argument)
        except Exception:
            logger.exception("Poller callback failed for %s", self.video_id)

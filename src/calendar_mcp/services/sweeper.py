from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs ``callback`` every ``interval`` on a daemon thread until stopped."""

    def __init__(self, name: str, interval: timedelta, callback: Callable[[], object]) -> None:
        self.name = name
        self.interval = interval
        self._callback = callback
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Started %s every %s", self.name, self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> None:
        try:
            self._callback()
        except Exception:  # noqa: BLE001
            logger.exception("Periodic task %s failed", self.name)

    def _run(self) -> None:
        seconds = max(self.interval.total_seconds(), 0.01)
        while not self._stop.wait(seconds):
            self.run_once()

"""Repeating timer used to count recording seconds."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.thread is not None:
            raise RuntimeError("Timer already started")
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.name = "RecordingTimerThread"
        self.thread.start()

    def cancel(self) -> None:
        """Stop the timer. No tick fires after this returns."""
        self.stop_event.set()
        if (self.thread and self.thread.is_alive()
                and self.thread is not threading.current_thread()):
            self.thread.join(timeout=2.0)
            if self.thread.is_alive():
                logger.warning("Timer thread did not stop cleanly")

    @property
    def is_running(self) -> bool:
        return self.thread is not None and not self.stop_event.is_set()

    def _run(self) -> None:
        # wait() returns True once cancelled
        while not self.stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Timer callback failed: {e}")

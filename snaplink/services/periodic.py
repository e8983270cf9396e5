"""Cancellable periodic background tasks.

A PeriodicTask runs an action on a daemon thread every `interval` seconds until
stop() is called. The stop signal is observed between cycles: a cycle that is
already running completes, and no new cycle starts afterwards.

Example:
    >>> task = PeriodicTask('expiry-sweep', 86400, lambda: sweep_expired(dao))
    >>> task.start()
    >>> ...
    >>> task.stop(timeout=5)
"""

import logging
import threading
from collections.abc import Callable
from typing import Any


logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run `action` every `interval` seconds on a background thread.

    Attributes:
        name (str):
            Task name, used for the thread name and in log records.
        interval (float):
            Seconds to wait before each cycle.
        action (Callable[[], Any]):
            Work performed by each cycle. Exceptions are logged, the loop keeps going.
    """

    def __init__(self, name: str, interval: float, action: Callable[[], Any]):
        if interval <= 0:
            raise ValueError(f'Interval must be a positive number of seconds (given value: {interval}).')

        self.name = name
        self.interval = interval
        self.action = action
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> 'PeriodicTask':
        if self.is_running:
            raise RuntimeError(f"Task '{self.name}' is already running.")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info('Started periodic task.', extra={'task': self.name, 'interval': self.interval})
        return self

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the task to stop and wait for the current cycle to finish

        Returns:
            bool: True if the thread has exited, False if `timeout` elapsed first.
        """
        self._stop_event.set()
        if self._thread is None:
            return True

        self._thread.join(timeout)
        stopped = not self._thread.is_alive()
        if stopped:
            self._thread = None
            logger.info('Stopped periodic task.', extra={'task': self.name})
        return stopped

    def run_once(self) -> Any:
        """Run a single cycle on the calling thread, propagating errors."""
        return self.action()

    def _run(self) -> None:
        # Event.wait() returns True as soon as stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.action()
            except Exception:
                logger.exception('Periodic task cycle failed.', extra={'task': self.name})

"""Single-slot debouncing on top of a pluggable timer source."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ThreadingScheduler:
    """Runs callbacks on ``threading.Timer`` daemon threads."""

    def call_later(self, delay: float, callback: Callable[[], None]):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class Debouncer:
    """Fire ``callback`` once, ``delay`` seconds after the last trigger.

    A new trigger replaces the pending timer rather than queueing another.
    ``flush`` runs a pending call immediately and cancels its timer, so a
    trigger is never dropped and never fires twice.
    """

    def __init__(self, delay: float, callback: Callable[[], None], scheduler=None):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler or ThreadingScheduler()
        self._handle = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self):
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
            self._generation += 1
            generation = self._generation
            self._handle = self.scheduler.call_later(self.delay, lambda: self._fire(generation))
        logger.debug(f"Debounce scheduled in {self.delay:.3f}s")

    def _fire(self, generation: int):
        with self._lock:
            # A timer that lost a race with trigger/flush/cancel is stale
            if generation != self._generation or self._handle is None:
                return
            self._handle = None
        self.callback()

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            if self._handle is None:
                return False
            self._handle.cancel()
            self._handle = None
            self._generation += 1
        self.callback()
        return True

    def cancel(self):
        with self._lock:
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None
            self._generation += 1

"""Single-flight guard, stuck-task watchdog and fixed-interval scheduler."""
import logging
import os
import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

from media_producer.errors import WatchdogTriggered
from media_producer.logging_conf import logger


def terminate_process(reason: WatchdogTriggered) -> None:
    """Exit immediately so the supervisor restarts us. Never returns."""
    logger.critical(f"{reason} - terminating process for restart")
    logging.shutdown()
    os._exit(1)


class SingleFlightGuard:
    """
    Runs a task at most once at a time and watches for a stuck run.

    A tick that arrives while the task is still running is skipped and
    counted. Once `skipping_counter_limit` ticks in a row have been skipped
    the stuck handler is called, once.
    """

    def __init__(self, task: Callable[[], object], skipping_counter_limit: int,
                 on_stuck: Callable[[WatchdogTriggered], None] = terminate_process,
                 name: str = "media-producer"):
        self.task = task
        self.skipping_counter_limit = skipping_counter_limit
        self.on_stuck = on_stuck
        self.name = name
        self.busy = False
        self.skip_count = 0
        self.triggered = False
        self._lock = threading.Lock()

    @contextmanager
    def _running(self):
        """Hold the busy flag for the duration of a run, released on any exit."""
        try:
            yield
        finally:
            with self._lock:
                self.busy = False

    def tick(self) -> bool:
        """Handle one scheduler tick. Returns True if the task ran."""
        with self._lock:
            if self.triggered:
                return False
            if self.busy:
                self.skip_count += 1
                if self.skip_count < self.skipping_counter_limit:
                    logger.warning(
                        f"{self.name} still running, skipping tick "
                        f"({self.skip_count}/{self.skipping_counter_limit})"
                    )
                    return False
                self.triggered = True
                stuck = WatchdogTriggered(self.skip_count, self.skipping_counter_limit)
            else:
                self.busy = True
                self.skip_count = 0
                stuck = None

        if stuck is not None:
            logger.critical(str(stuck))
            self.on_stuck(stuck)
            return False

        with self._running():
            try:
                self.task()
            except Exception as e:
                logger.error(f"{self.name} run failed: {e}", exc_info=True)
        return True


class Scheduler:
    """Fires guard ticks on a fixed interval from a background thread."""

    def __init__(self, guard: SingleFlightGuard, interval: float):
        self.guard = guard
        self.interval = interval
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._tick_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self):
        """Start the scheduler in a background thread."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._run, name="scheduler", daemon=True)
        self.thread.start()
        logger.info(f"Scheduler started (interval: {self.interval}s)")

    def stop(self, timeout: float = 10):
        """Stop the scheduler and wait briefly for an in-flight tick."""
        if not self.running:
            return

        self.running = False
        self._stop_event.set()
        if self.thread:
            self.thread.join(timeout=timeout)
        if self._tick_thread and self._tick_thread.is_alive():
            self._tick_thread.join(timeout=timeout)
        logger.info("Scheduler stopped")

    def _run(self):
        """Timer loop. Ticks run on their own threads so a hung run can't stall it."""
        next_run = time.monotonic()
        while self.running:
            self._fire()
            next_run += self.interval
            if self._stop_event.wait(max(0.0, next_run - time.monotonic())):
                break

    def _fire(self):
        self._tick_thread = threading.Thread(target=self.guard.tick, name="tick", daemon=True)
        self._tick_thread.start()

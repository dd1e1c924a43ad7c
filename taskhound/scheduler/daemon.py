"""Scheduler poll loop.

The loop wakes every cadence tick (300ms by default), looks for tasks whose
next run time equals the current second, writes their next run time back to
the registry and fires the callback on its own daemon thread. Callbacks are
fire-and-forget: the loop never waits for them and never sees their errors.

The due check is an exact-second match. A task whose second is skipped (a
stalled process, a clock jump) misses that run and waits for its next natural
occurrence; there is no catch-up.
"""

import logging
import signal
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

from taskhound.messaging import Notifier, get_notifier
from taskhound.scheduler.builder import (
    MISCONFIGURED_MESSAGE,
    NEXT_RUN_MESSAGE,
    TaskBuilder,
)
from taskhound.scheduler.recurrence import (
    OneTime,
    format_timestamp,
    next_run_after_fire,
)
from taskhound.scheduler.registry import TaskRegistry
from taskhound.scheduler.task import ScheduledTask
from taskhound.settings import get_settings

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """Lifecycle of the poll loop."""

    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class Scheduler:
    """Owns a task registry and the loop that dispatches its due tasks."""

    def __init__(
        self,
        registry: Optional[TaskRegistry] = None,
        notifier: Optional[Notifier] = None,
        *,
        cadence: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        settings = get_settings().scheduler
        cadence = settings.cadence_seconds if cadence is None else float(cadence)
        if cadence <= 0:
            raise ValueError("cadence must be positive")

        self._cadence = cadence
        self._notifier = notifier
        self._clock = clock or datetime.now
        self._onetime_fallback = timedelta(hours=settings.onetime_fallback_hours)
        self.registry = registry if registry is not None else TaskRegistry(notifier)

        self._cancel = threading.Event()
        self._state = LoopState.IDLE
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    @property
    def notifier(self) -> Notifier:
        return self._notifier or get_notifier()

    @property
    def cadence(self) -> float:
        return self._cadence

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state in (LoopState.RUNNING, LoopState.DRAINING)

    def _set_state(self, state: LoopState) -> None:
        with self._state_lock:
            self._state = state
        logger.debug("scheduler state -> %s", state.value)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def task(self, name: str = "") -> TaskBuilder:
        """Start building a task; an empty name gets a generated identifier."""
        return TaskBuilder(
            self.registry,
            name,
            notifier=self._notifier,
            clock=self._clock,
            onetime_fallback=self._onetime_fallback,
        )

    def get(self, name: str) -> Optional[ScheduledTask]:
        return self.registry.get(name)

    def tasks(self) -> List[ScheduledTask]:
        return self.registry.snapshot()

    def reset(self) -> None:
        self.registry.reset()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def tick(self, now: Optional[datetime] = None) -> int:
        """Run a single sweep over the registry.

        Returns the number of callbacks dispatched.
        """
        now = now or self._clock()
        now_ts = int(now.timestamp())
        fired = 0

        for task in self.registry.snapshot():
            if not task.is_due(now_ts):
                continue
            updated = self.reschedule(task, now)
            if updated is None or updated.callback is None:
                continue
            self._dispatch(updated)
            fired += 1

        return fired

    def reschedule(self, task: ScheduledTask, now: datetime) -> Optional[ScheduledTask]:
        """Store the run after ``now`` for ``task`` and stamp its last run.

        One-time tasks get next_run_at = 0 and are never fired again.
        """
        next_run = next_run_after_fire(task.rule, now)
        one_time = isinstance(task.rule, OneTime)
        if next_run == 0 and not one_time:
            self.notifier.error(MISCONFIGURED_MESSAGE.format(name=task.name))

        updated = self.registry.reschedule(task, next_run, int(now.timestamp()))
        if updated is None:
            logger.debug("task %s changed before reschedule; skipping", task.name)
            return None

        if next_run and not one_time:
            when = format_timestamp(next_run, self.notifier.datetime_format)
            self.notifier.info(NEXT_RUN_MESSAGE.format(name=task.name, when=when))
        return updated

    def _dispatch(self, task: ScheduledTask) -> threading.Thread:
        thread = threading.Thread(
            target=task.callback,
            name=f"taskhound-{task.name}",
            daemon=True,
        )
        thread.start()
        return thread

    # ------------------------------------------------------------------
    # Loop control
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Poll until cancel() is called, then clear the registry and return."""
        with self._state_lock:
            if self._state in (LoopState.RUNNING, LoopState.DRAINING):
                raise RuntimeError("scheduler loop is already running")
            self._state = LoopState.RUNNING

        logger.info("scheduler loop started (cadence=%ss)", self._cadence)

        while True:
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler sweep failed")

            if self._cancel.wait(self._cadence):
                break

        self._set_state(LoopState.DRAINING)
        self._cancel.clear()
        self.registry.reset()
        self._set_state(LoopState.STOPPED)
        logger.info("scheduler loop stopped")

    def cancel(self) -> None:
        """Ask the loop to stop once its current sweep completes."""
        self._cancel.set()

    def start_background(self) -> threading.Thread:
        """Run the loop on a daemon thread and return that thread."""
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._thread = threading.Thread(
            target=self.run, name="taskhound-scheduler", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Cancel the loop and wait for the background thread to exit.

        Returns True if no background loop is left running.
        """
        self.cancel()
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()


def install_signal_handlers(scheduler: Scheduler) -> None:
    """Cancel ``scheduler`` on SIGINT/SIGTERM (main thread only)."""

    def signal_handler(signum, frame):
        logger.info("received signal %s, shutting down", signum)
        scheduler.cancel()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

"""In-memory task registry.

Maps task name -> current ScheduledTask. Writes (put, reset) and snapshots are
taken under a single lock; a plain ``get`` is a lock-free dict lookup.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from taskhound.messaging import Notifier, get_notifier
from taskhound.scheduler.task import ScheduledTask

logger = logging.getLogger(__name__)

RESET_MESSAGE = "reloading task schedulers..."


class TaskRegistry:
    """Lock-guarded mapping from task name to its scheduled entry."""

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._tasks: Dict[str, ScheduledTask] = {}
        self._lock = threading.Lock()
        self._notifier = notifier

    @property
    def notifier(self) -> Notifier:
        return self._notifier or get_notifier()

    def get(self, name: str) -> Optional[ScheduledTask]:
        """Return the entry registered under ``name``, or None."""
        return self._tasks.get(name)

    def put(self, name: str, task: ScheduledTask) -> None:
        """Insert or replace the entry for ``name``."""
        with self._lock:
            self._tasks[name] = task
        logger.debug("registry put %s (next_run_at=%s)", name, task.next_run_at)

    def reschedule(
        self, task: ScheduledTask, next_run_at: int, last_run_at: int
    ) -> Optional[ScheduledTask]:
        """Write back new run times for ``task`` if it is still the live entry.

        Returns the updated entry, or None when the name was re-registered or
        the registry was reset since ``task`` was read.
        """
        with self._lock:
            if self._tasks.get(task.name) is not task:
                return None
            updated = replace(task, next_run_at=next_run_at, last_run_at=last_run_at)
            self._tasks[task.name] = updated
            return updated

    def snapshot(self) -> List[ScheduledTask]:
        """Copy of the current entries, safe to iterate while others write."""
        with self._lock:
            return list(self._tasks.values())

    def names(self) -> List[str]:
        with self._lock:
            return list(self._tasks)

    def reset(self) -> None:
        """Discard every entry."""
        with self._lock:
            self._tasks = {}
        self.notifier.warning(RESET_MESSAGE)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

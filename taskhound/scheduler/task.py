"""Scheduled task entries.

A ScheduledTask is what the registry stores: the task's name, its recurrence
rule, the callback to fire and the bookkeeping timestamps the poll loop uses.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from taskhound.scheduler.recurrence import (
    RULE_TYPES,
    RecurrenceRule,
    describe_rule,
)

TaskCallback = Callable[[], None]


@dataclass
class ScheduledTask:
    """A registered task and its next/last run times (unix seconds)."""

    name: str
    rule: Optional[RecurrenceRule] = None
    callback: Optional[TaskCallback] = None
    next_run_at: int = 0  # 0 = never fires
    last_run_at: int = 0
    created_at: int = field(default_factory=lambda: int(time.time()))

    @property
    def is_misconfigured(self) -> bool:
        return not isinstance(self.rule, RULE_TYPES)

    @property
    def run_type(self) -> str:
        if self.is_misconfigured:
            return ""
        return self.rule.run_type.value

    def is_due(self, now_ts: int) -> bool:
        """Exact-second match; an entry whose second was skipped is not due."""
        return self.next_run_at != 0 and self.next_run_at == now_ts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "run_type": self.run_type,
            "schedule": describe_rule(self.rule),
            "next_run_at": self.next_run_at,
            "last_run_at": self.last_run_at,
            "created_at": self.created_at,
        }

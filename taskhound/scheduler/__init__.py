"""Taskhound Scheduler - run callbacks on recurring schedules.

An in-process scheduler: tasks are registered through a fluent builder and a
background loop fires them when their next run time comes up.

Components:
    - recurrence: Recurrence rules and next-run-time computation
    - task: The ScheduledTask registry entry
    - registry: Lock-guarded name -> task mapping
    - builder: Fluent TaskBuilder producing immutable TaskSpecs
    - daemon: The Scheduler poll loop and its cancellation path
    - cli: Status/list handlers and the foreground runner
"""

from taskhound.scheduler.builder import TaskBuilder, TaskSpec
from taskhound.scheduler.daemon import LoopState, Scheduler, install_signal_handlers
from taskhound.scheduler.recurrence import (
    Daily,
    FrequencyUnit,
    Frequently,
    Monthly,
    OneTime,
    RecurrenceRule,
    RunType,
    Weekday,
    Weekly,
    compute_next_run,
    last_day_of_month,
    next_run_after_fire,
    parse_time_of_day,
    resolve_month_day,
)
from taskhound.scheduler.registry import TaskRegistry
from taskhound.scheduler.task import ScheduledTask, TaskCallback

__all__ = [
    "Scheduler",
    "LoopState",
    "install_signal_handlers",
    "TaskBuilder",
    "TaskSpec",
    "TaskRegistry",
    "ScheduledTask",
    "TaskCallback",
    # Recurrence
    "RecurrenceRule",
    "RunType",
    "FrequencyUnit",
    "Weekday",
    "OneTime",
    "Frequently",
    "Daily",
    "Weekly",
    "Monthly",
    "compute_next_run",
    "next_run_after_fire",
    "resolve_month_day",
    "last_day_of_month",
    "parse_time_of_day",
]

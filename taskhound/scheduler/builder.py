"""Fluent task construction.

    scheduler.task("backup").daily().at("02:30").exec_func(run_backup).commit()
    scheduler.task("poll").every_seconds(10).exec_func(poll).commit()
    scheduler.task("report").weekly().monday().at("09:00").exec_func(report).commit()
    scheduler.task("invoice").monthly().every(0).at("18:00").exec_func(bill).commit()

Each call replaces the builder's immutable TaskSpec, so a spec handed out by
``build()`` never changes underneath its holder. ``commit()`` computes the
first run time and inserts the entry into the registry.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union

from taskhound.messaging import Notifier
from taskhound.scheduler.recurrence import (
    DEFAULT_ONETIME_FALLBACK,
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
    format_timestamp,
    parse_time_of_day,
    resolve_month_day,
    to_timestamp,
)
from taskhound.scheduler.registry import TaskRegistry
from taskhound.scheduler.task import ScheduledTask, TaskCallback

logger = logging.getLogger(__name__)

MISCONFIGURED_MESSAGE = "{name} is not running due to incorrect or missing parameters"
NEXT_RUN_MESSAGE = "{name} next schedule to run on: {when}"


@dataclass(frozen=True)
class TaskSpec:
    """Everything a caller configured for one task, before it is committed."""

    name: str
    created_at: int
    kind: Optional[RunType] = None
    run_at: int = 0
    unit: Optional[FrequencyUnit] = None
    value: int = 0
    weekday: Weekday = Weekday.SUNDAY
    month_day: int = 0  # 0 = last day of the month, resolved when the rule is built
    hour: int = 0
    minute: int = 0
    callback: Optional[TaskCallback] = None

    def to_rule(self, today: Optional[date] = None) -> Optional[RecurrenceRule]:
        """The recurrence rule this spec describes, or None if it is incomplete."""
        if self.kind == RunType.ONE_TIME:
            return OneTime(run_at=self.run_at)
        if self.kind == RunType.FREQUENTLY:
            if self.unit is None:
                return None
            return Frequently(unit=self.unit, value=self.value)
        if self.kind == RunType.DAILY:
            return Daily(hour=self.hour, minute=self.minute)
        if self.kind == RunType.WEEKLY:
            return Weekly(weekday=self.weekday, hour=self.hour, minute=self.minute)
        if self.kind == RunType.MONTHLY:
            day = self.month_day
            if not day:
                today = today or date.today()
                day = resolve_month_day(0, today.month, today.year)
            return Monthly(day=day, hour=self.hour, minute=self.minute)
        return None


class TaskBuilder:
    """Chainable builder for a single task."""

    def __init__(
        self,
        registry: TaskRegistry,
        name: str = "",
        *,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        onetime_fallback: timedelta = DEFAULT_ONETIME_FALLBACK,
    ) -> None:
        self._registry = registry
        self._notifier = notifier
        self._clock = clock or datetime.now
        self._onetime_fallback = onetime_fallback
        now = self._clock()
        self._spec = TaskSpec(
            name=self._unique_name(name, now),
            created_at=int(now.timestamp()),
        )

    def _unique_name(self, name: str, now: datetime) -> str:
        name = (name or "").strip()
        if not name:
            return str(uuid.uuid4())
        if name not in self._registry:
            return name
        # Keep the existing entry; the new task gets its own key.
        base = f"{name}_{int(now.timestamp())}"
        candidate = base
        n = 1
        while candidate in self._registry:
            candidate = f"{base}_{n}"
            n += 1
        return candidate

    def _update(self, **changes) -> "TaskBuilder":
        self._spec = replace(self._spec, **changes)
        return self

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def notifier(self) -> Notifier:
        return self._notifier or self._registry.notifier

    # ------------------------------------------------------------------
    # Run types
    # ------------------------------------------------------------------
    def one_time(self, run_at: Union[int, float, datetime]) -> "TaskBuilder":
        """Run once at ``run_at`` (unix seconds or a datetime)."""
        return self._update(kind=RunType.ONE_TIME, run_at=to_timestamp(run_at))

    def frequently(self) -> "TaskBuilder":
        """Select a fixed-interval run; pair with seconds(), minutes() or hours()."""
        return self._update(kind=RunType.FREQUENTLY)

    def daily(self) -> "TaskBuilder":
        return self._update(kind=RunType.DAILY)

    def weekly(self) -> "TaskBuilder":
        return self._update(kind=RunType.WEEKLY)

    def monthly(self) -> "TaskBuilder":
        return self._update(kind=RunType.MONTHLY)

    # ------------------------------------------------------------------
    # Intervals
    # ------------------------------------------------------------------
    def _interval(self, unit: FrequencyUnit, interval: int) -> "TaskBuilder":
        return self._update(unit=unit, value=max(1, int(interval)))

    def seconds(self, interval: int) -> "TaskBuilder":
        return self._interval(FrequencyUnit.SECONDS, interval)

    def minutes(self, interval: int) -> "TaskBuilder":
        return self._interval(FrequencyUnit.MINUTES, interval)

    def hours(self, interval: int) -> "TaskBuilder":
        return self._interval(FrequencyUnit.HOURS, interval)

    def every_seconds(self, interval: int) -> "TaskBuilder":
        return self.frequently().seconds(interval)

    def every_minutes(self, interval: int) -> "TaskBuilder":
        return self.frequently().minutes(interval)

    def every_hours(self, interval: int) -> "TaskBuilder":
        return self.frequently().hours(interval)

    # ------------------------------------------------------------------
    # Weekdays (weekly only)
    # ------------------------------------------------------------------
    def on(self, weekday: Union[Weekday, int]) -> "TaskBuilder":
        return self._update(weekday=Weekday(weekday))

    def monday(self) -> "TaskBuilder":
        return self.on(Weekday.MONDAY)

    def tuesday(self) -> "TaskBuilder":
        return self.on(Weekday.TUESDAY)

    def wednesday(self) -> "TaskBuilder":
        return self.on(Weekday.WEDNESDAY)

    def thursday(self) -> "TaskBuilder":
        return self.on(Weekday.THURSDAY)

    def friday(self) -> "TaskBuilder":
        return self.on(Weekday.FRIDAY)

    def saturday(self) -> "TaskBuilder":
        return self.on(Weekday.SATURDAY)

    def sunday(self) -> "TaskBuilder":
        return self.on(Weekday.SUNDAY)

    # ------------------------------------------------------------------
    # Day of month / time of day
    # ------------------------------------------------------------------
    def every(self, day: int) -> "TaskBuilder":
        """Day of the month for monthly tasks; 0 or an overflow means the last day."""
        now = self._clock()
        return self._update(month_day=resolve_month_day(day, now.month, now.year))

    def at(self, hhmm: str) -> "TaskBuilder":
        """Time of day as "HH:MM" (24-hour clock); ignored for one-time and frequent runs."""
        if self._spec.kind in (RunType.ONE_TIME, RunType.FREQUENTLY):
            logger.debug("at(%r) ignored for %s task %s", hhmm, self._spec.kind.value, self.name)
            return self
        hour, minute = parse_time_of_day(hhmm)
        return self._update(hour=hour, minute=minute)

    def exec_func(self, callback: TaskCallback) -> "TaskBuilder":
        return self._update(callback=callback)

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------
    def build(self) -> TaskSpec:
        return self._spec

    def commit(self) -> ScheduledTask:
        """Compute the first run time and insert the task into the registry.

        Misconfigured tasks (no run type, no interval unit, no callback) are
        still registered, with next_run_at = 0, so they never fire.
        """
        spec = self._spec
        now = self._clock()
        rule = spec.to_rule(now.date())
        next_run = None
        if spec.callback is not None:
            next_run = compute_next_run(
                rule, now, onetime_fallback=self._onetime_fallback
            )

        if next_run is None:
            self.notifier.error(MISCONFIGURED_MESSAGE.format(name=spec.name))
            next_run = 0
        else:
            when = format_timestamp(next_run, self.notifier.datetime_format)
            self.notifier.info(NEXT_RUN_MESSAGE.format(name=spec.name, when=when))

        task = ScheduledTask(
            name=spec.name,
            rule=rule,
            callback=spec.callback,
            next_run_at=next_run,
            last_run_at=0,
            created_at=spec.created_at,
        )
        self._registry.put(spec.name, task)
        return task

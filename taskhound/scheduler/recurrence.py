"""Recurrence rules and next-run-time computation.

Every rule is a small frozen dataclass. ``compute_next_run`` turns a rule and
the current local time into the unix timestamp (whole seconds) at which the
task should fire next:

    - OneTime:    the configured timestamp, or now + 24h if it is not in the future
    - Frequently: now + value * unit
    - Daily:      tomorrow at HH:MM (always tomorrow, even if today's slot is ahead)
    - Weekly:     most recent occurrence of the weekday at HH:MM, plus 7 days
    - Monthly:    next calendar month, day resolved at configuration time

Weekly anchors on the latest occurrence of the weekday, today included, so the
next run is always 1 to 7 days ahead. It does not anchor on the weekday within
the current Sunday-start week; under that rule a weekday later this week would
land 8 to 13 days out.

Monthly days are resolved once, when the task is configured, and the result is
applied as an offset from the first of next month. A day clamped to 31 in a long
month therefore rolls over into the month after a 30-day month.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time as dtime, timedelta
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Tuple, Union

DEFAULT_ONETIME_FALLBACK = timedelta(hours=24)

_TIME_OF_DAY_RE = re.compile(r"^([0-9]{2}):([0-9]{2})$")


class RunType(str, Enum):
    """Recurrence kinds."""

    ONE_TIME = "onetime"
    FREQUENTLY = "frequently"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FrequencyUnit(str, Enum):
    """Interval units for frequently-run tasks."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"

    @property
    def seconds(self) -> int:
        return _UNIT_SECONDS[self]


_UNIT_SECONDS = {
    FrequencyUnit.SECONDS: 1,
    FrequencyUnit.MINUTES: 60,
    FrequencyUnit.HOURS: 60 * 60,
}


class Weekday(IntEnum):
    """Days of the week, numbered like ``datetime.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


def _check_time(hour: int, minute: int) -> None:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be within 0-23, got {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute must be within 0-59, got {minute}")


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class OneTime:
    run_at: int

    run_type: ClassVar[RunType] = RunType.ONE_TIME


@dataclass(frozen=True)
class Frequently:
    unit: FrequencyUnit
    value: int = 1

    run_type: ClassVar[RunType] = RunType.FREQUENTLY

    def __post_init__(self):
        object.__setattr__(self, "unit", FrequencyUnit(self.unit))
        if self.value <= 0:
            object.__setattr__(self, "value", 1)

    @property
    def interval_seconds(self) -> int:
        return self.value * self.unit.seconds


@dataclass(frozen=True)
class Daily:
    hour: int = 0
    minute: int = 0

    run_type: ClassVar[RunType] = RunType.DAILY

    def __post_init__(self):
        _check_time(self.hour, self.minute)


@dataclass(frozen=True)
class Weekly:
    weekday: Weekday = Weekday.SUNDAY
    hour: int = 0
    minute: int = 0

    run_type: ClassVar[RunType] = RunType.WEEKLY

    def __post_init__(self):
        object.__setattr__(self, "weekday", Weekday(self.weekday))
        _check_time(self.hour, self.minute)


@dataclass(frozen=True)
class Monthly:
    day: int
    hour: int = 0
    minute: int = 0

    run_type: ClassVar[RunType] = RunType.MONTHLY

    def __post_init__(self):
        _check_time(self.hour, self.minute)


RecurrenceRule = Union[OneTime, Frequently, Daily, Weekly, Monthly]
RULE_TYPES = (OneTime, Frequently, Daily, Weekly, Monthly)


# =============================================================================
# Calendar helpers
# =============================================================================


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def resolve_month_day(
    day: int, month: Optional[int] = None, year: Optional[int] = None
) -> int:
    """Clamp a requested day-of-month against a concrete month.

    0 means "last day of the month". Values beyond the month's last day clamp
    to it, and negatives are treated like 0. Month and year default to today's.
    """
    today = date.today()
    month = today.month if month is None else month
    year = today.year if year is None else year
    last = last_day_of_month(year, month)
    if day <= 0 or day > last:
        return last
    return day


def parse_time_of_day(text: Optional[str]) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute); anything malformed gives midnight."""
    match = _TIME_OF_DAY_RE.match((text or "").strip())
    if not match:
        return (0, 0)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return (0, 0)
    return (hour, minute)


def _local_timestamp(day: date, hour: int, minute: int) -> int:
    return int(datetime.combine(day, dtime(hour, minute)).timestamp())


def _first_of_next_month(today: date) -> date:
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)


def to_timestamp(value: Union[int, float, datetime]) -> int:
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)


def format_timestamp(ts: int, fmt: str) -> str:
    """Render a unix timestamp in local time."""
    return datetime.fromtimestamp(ts).strftime(fmt)


# =============================================================================
# Next run computation
# =============================================================================


def compute_next_run(
    rule: Optional[RecurrenceRule],
    now: datetime,
    *,
    onetime_fallback: timedelta = DEFAULT_ONETIME_FALLBACK,
) -> Optional[int]:
    """Compute the next absolute run time for ``rule``.

    Args:
        rule: The recurrence rule, or None.
        now: Current naive local time.
        onetime_fallback: Delay used when a one-time timestamp is already past.

    Returns:
        Unix timestamp in seconds, or None when the rule is missing or not
        one of the known rule types.
    """
    now_ts = int(now.timestamp())
    today = now.date()

    if isinstance(rule, OneTime):
        if rule.run_at > now_ts:
            return rule.run_at
        return now_ts + int(onetime_fallback.total_seconds())

    if isinstance(rule, Frequently):
        return now_ts + rule.interval_seconds

    if isinstance(rule, Daily):
        return _local_timestamp(today + timedelta(days=1), rule.hour, rule.minute)

    if isinstance(rule, Weekly):
        days_back = (today.weekday() - int(rule.weekday)) % 7
        anchor = today - timedelta(days=days_back)
        return _local_timestamp(anchor + timedelta(days=7), rule.hour, rule.minute)

    if isinstance(rule, Monthly):
        # Offset from the 1st so out-of-range days roll forward instead of failing
        target = _first_of_next_month(today) + timedelta(days=rule.day - 1)
        return _local_timestamp(target, rule.hour, rule.minute)

    return None


def next_run_after_fire(rule: Optional[RecurrenceRule], now: datetime) -> int:
    """Next run time to store once a task has fired; 0 means never again."""
    if rule is None or isinstance(rule, OneTime):
        return 0
    return compute_next_run(rule, now) or 0


def describe_rule(rule: Optional[RecurrenceRule]) -> str:
    """Short human-readable summary, used by the CLI listings."""
    if isinstance(rule, OneTime):
        return f"once at {datetime.fromtimestamp(rule.run_at).isoformat(timespec='seconds')}"
    if isinstance(rule, Frequently):
        return f"every {rule.value} {rule.unit.value}"
    if isinstance(rule, Daily):
        return f"daily at {rule.hour:02d}:{rule.minute:02d}"
    if isinstance(rule, Weekly):
        return f"weekly on {rule.weekday.name.title()} at {rule.hour:02d}:{rule.minute:02d}"
    if isinstance(rule, Monthly):
        return f"monthly on day {rule.day} at {rule.hour:02d}:{rule.minute:02d}"
    return "misconfigured"

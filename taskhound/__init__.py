import importlib.metadata

try:
    _detected_version = importlib.metadata.version("taskhound")
    # Ensure we never end up with None or empty string
    __version__ = _detected_version if _detected_version else "0.0.0-dev"
except Exception:
    # Fallback for dev environments where metadata might not be available
    __version__ = "0.0.0-dev"

from taskhound.settings import (
    DisplaySettings,
    LevelColors,
    SchedulerSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from taskhound.scheduler import (
    Scheduler,
    ScheduledTask,
    TaskBuilder,
    TaskRegistry,
    Weekday,
)

__all__ = [
    "__version__",
    # Settings
    "Settings",
    "SchedulerSettings",
    "DisplaySettings",
    "LevelColors",
    "get_settings",
    "clear_settings_cache",
    # Scheduler
    "Scheduler",
    "ScheduledTask",
    "TaskBuilder",
    "TaskRegistry",
    "Weekday",
]

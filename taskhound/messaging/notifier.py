"""Notification sink used by the scheduler.

A Notifier turns ``notify(message, level)`` calls into TextMessage
instances, logs them through stdlib logging, renders them to the console
with Rich and fans them out to any subscribed listeners.
"""

import logging
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, Optional

from taskhound.settings import DEFAULT_DATETIME_FORMAT, get_settings

from .messages import MessageLevel, TextMessage
from .rich_renderer import RendererProtocol, RichConsoleRenderer

logger = logging.getLogger(__name__)

Listener = Callable[[TextMessage], None]

_LOG_LEVELS = {
    MessageLevel.DEBUG: logging.DEBUG,
    MessageLevel.INFO: logging.INFO,
    MessageLevel.SUCCESS: logging.INFO,
    MessageLevel.WARNING: logging.WARNING,
    MessageLevel.ERROR: logging.ERROR,
}


class Notifier:
    """Severity-tagged notification sink with a configurable timestamp format."""

    def __init__(
        self,
        renderer: Optional[RendererProtocol] = None,
        *,
        datetime_format: Optional[str] = None,
        console_output: Optional[bool] = None,
        history_size: int = 200,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        settings = get_settings()
        if console_output is None:
            console_output = settings.display.console_output
        if renderer is None and console_output:
            renderer = RichConsoleRenderer(
                styles={
                    MessageLevel(name): style
                    for name, style in settings.colors.as_dict().items()
                },
                suppress_informational=settings.display.suppress_informational_messages,
            )
        self._renderer = renderer
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self._history: Deque[TextMessage] = deque(maxlen=history_size)
        self._datetime_format = DEFAULT_DATETIME_FORMAT
        self.set_datetime_format(datetime_format or settings.scheduler.datetime_format)

    # ------------------------------------------------------------------
    @property
    def datetime_format(self) -> str:
        return self._datetime_format

    def set_datetime_format(self, fmt: Optional[str]) -> str:
        """Change the timestamp pattern; a blank pattern restores the default."""
        if not fmt or not fmt.strip():
            fmt = DEFAULT_DATETIME_FORMAT
        with self._lock:
            self._datetime_format = fmt
        return fmt

    def format_time(self, moment: datetime) -> str:
        return moment.strftime(self._datetime_format)

    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def recent(self, level: Optional[MessageLevel] = None) -> List[TextMessage]:
        """Messages still held in the history buffer, oldest first."""
        with self._lock:
            messages = list(self._history)
        if level is None:
            return messages
        return [m for m in messages if m.level == level]

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()

    # ------------------------------------------------------------------
    def notify(self, message: str, level: MessageLevel = MessageLevel.INFO) -> TextMessage:
        level = MessageLevel(level)
        msg = TextMessage(
            level=level,
            text=message,
            log_time=self.format_time(self._clock()),
        )

        logger.log(_LOG_LEVELS[level], message, extra={"log_time": msg.log_time})

        with self._lock:
            self._history.append(msg)
            listeners = list(self._listeners)

        if self._renderer is not None:
            self._renderer.render(msg)

        for listener in listeners:
            try:
                listener(msg)
            except Exception:
                logger.exception("notification listener failed")

        return msg

    def info(self, message: str) -> TextMessage:
        return self.notify(message, MessageLevel.INFO)

    def success(self, message: str) -> TextMessage:
        return self.notify(message, MessageLevel.SUCCESS)

    def warning(self, message: str) -> TextMessage:
        return self.notify(message, MessageLevel.WARNING)

    def error(self, message: str) -> TextMessage:
        return self.notify(message, MessageLevel.ERROR)

    def debug(self, message: str) -> TextMessage:
        return self.notify(message, MessageLevel.DEBUG)


# =============================================================================
# Process-wide default notifier
# =============================================================================

_default_notifier: Optional[Notifier] = None
_default_lock = threading.Lock()


def get_notifier() -> Notifier:
    """Return the default notifier, creating it on first use."""
    global _default_notifier
    with _default_lock:
        if _default_notifier is None:
            _default_notifier = Notifier()
        return _default_notifier


def set_notifier(notifier: Notifier) -> None:
    global _default_notifier
    with _default_lock:
        _default_notifier = notifier


def reset_notifier() -> None:
    """Drop the default notifier so the next get_notifier() builds a fresh one."""
    global _default_notifier
    with _default_lock:
        _default_notifier = None


def set_log_datetime_format(fmt: Optional[str]) -> str:
    """Customize the timestamp pattern used by the default notifier."""
    return get_notifier().set_datetime_format(fmt)


def emit_info(message: str) -> TextMessage:
    return get_notifier().info(message)


def emit_success(message: str) -> TextMessage:
    return get_notifier().success(message)


def emit_warning(message: str) -> TextMessage:
    return get_notifier().warning(message)


def emit_error(message: str) -> TextMessage:
    return get_notifier().error(message)

"""Taskhound Messaging System.

The scheduler reports everything it does through a notification sink:
informational (task registered / next run computed), warning (registry
reset) and error (misconfigured task skipped).

Example:
    >>> from taskhound.messaging import emit_info, emit_error
    >>> emit_info("Operation complete")
    >>> emit_error("Something went wrong")
"""

from .messages import MessageLevel, TextMessage
from .notifier import (
    Listener,
    Notifier,
    emit_error,
    emit_info,
    emit_success,
    emit_warning,
    get_notifier,
    reset_notifier,
    set_log_datetime_format,
    set_notifier,
)
from .rich_renderer import DEFAULT_STYLES, RendererProtocol, RichConsoleRenderer

__all__ = [
    # Models
    "MessageLevel",
    "TextMessage",
    # Sink
    "Listener",
    "Notifier",
    "get_notifier",
    "set_notifier",
    "reset_notifier",
    "set_log_datetime_format",
    # Convenience functions
    "emit_info",
    "emit_success",
    "emit_warning",
    "emit_error",
    # Renderer
    "RendererProtocol",
    "RichConsoleRenderer",
    "DEFAULT_STYLES",
]

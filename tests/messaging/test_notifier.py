"""Tests for the notification sink."""

import logging
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from taskhound.messaging import (
    MessageLevel,
    Notifier,
    RichConsoleRenderer,
    TextMessage,
    emit_error,
    emit_info,
    emit_success,
    emit_warning,
    get_notifier,
    reset_notifier,
    set_log_datetime_format,
)
from taskhound.settings import DEFAULT_DATETIME_FORMAT


def fixed_clock():
    return datetime(2024, 5, 15, 14, 5, 9)


class TestNotify:
    """Tests for Notifier.notify and the level helpers."""

    def test_notify_returns_message(self, notifier):
        msg = notifier.notify("hello")
        assert isinstance(msg, TextMessage)
        assert msg.level == MessageLevel.INFO
        assert msg.text == "hello"

    @pytest.mark.parametrize(
        "method,level",
        [
            ("info", MessageLevel.INFO),
            ("success", MessageLevel.SUCCESS),
            ("warning", MessageLevel.WARNING),
            ("error", MessageLevel.ERROR),
            ("debug", MessageLevel.DEBUG),
        ],
    )
    def test_level_helpers(self, notifier, method, level):
        msg = getattr(notifier, method)("x")
        assert msg.level == level

    def test_accepts_plain_string_level(self, notifier):
        assert notifier.notify("x", "warning").level == MessageLevel.WARNING

    def test_log_time_uses_default_format(self):
        n = Notifier(console_output=False, clock=fixed_clock)
        assert n.datetime_format == DEFAULT_DATETIME_FORMAT
        assert n.info("x").log_time == "May 15 2024 02:05:09 PM"

    def test_messages_are_logged(self, notifier, caplog):
        with caplog.at_level(logging.DEBUG, logger="taskhound.messaging.notifier"):
            notifier.error("task failed")
            notifier.warning("careful")

        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert (logging.ERROR, "task failed") in levels
        assert (logging.WARNING, "careful") in levels
        assert all(hasattr(r, "log_time") for r in caplog.records)


class TestDatetimeFormat:
    """Tests for the configurable timestamp pattern."""

    def test_set_datetime_format(self):
        n = Notifier(console_output=False, clock=fixed_clock)
        n.set_datetime_format("%Y-%m-%d %H:%M")
        assert n.info("x").log_time == "2024-05-15 14:05"

    @pytest.mark.parametrize("fmt", ["", "   ", None])
    def test_blank_format_restores_default(self, fmt):
        n = Notifier(console_output=False, datetime_format="%H")
        assert n.set_datetime_format(fmt) == DEFAULT_DATETIME_FORMAT
        assert n.datetime_format == DEFAULT_DATETIME_FORMAT

    def test_constructor_format(self):
        n = Notifier(console_output=False, datetime_format="%d/%m", clock=fixed_clock)
        assert n.info("x").log_time == "15/05"

    def test_set_log_datetime_format_changes_default_notifier(self):
        set_log_datetime_format("%H:%M")
        assert get_notifier().datetime_format == "%H:%M"


class TestHistoryAndListeners:
    """Tests for history and fan-out."""

    def test_recent_filters_by_level(self, notifier):
        notifier.info("a")
        notifier.error("b")
        notifier.info("c")
        assert [m.text for m in notifier.recent()] == ["a", "b", "c"]
        assert [m.text for m in notifier.recent(MessageLevel.INFO)] == ["a", "c"]

    def test_history_is_bounded(self):
        n = Notifier(console_output=False, history_size=3)
        for i in range(5):
            n.info(str(i))
        assert [m.text for m in n.recent()] == ["2", "3", "4"]

    def test_clear_history(self, notifier):
        notifier.info("a")
        notifier.clear_history()
        assert notifier.recent() == []

    def test_listener_receives_messages(self, notifier):
        received = []
        unsubscribe = notifier.subscribe(received.append)

        notifier.warning("one")
        unsubscribe()
        notifier.warning("two")

        assert [m.text for m in received] == ["one"]

    def test_failing_listener_is_logged(self, notifier, caplog):
        def broken(msg):
            raise RuntimeError("listener down")

        good = MagicMock()
        notifier.subscribe(broken)
        notifier.subscribe(good)

        with caplog.at_level(logging.ERROR, logger="taskhound.messaging.notifier"):
            notifier.info("x")

        good.assert_called_once()
        assert "notification listener failed" in caplog.text


class TestRendering:
    """Tests for renderer wiring."""

    def test_custom_renderer_receives_message(self):
        renderer = MagicMock()
        n = Notifier(renderer)
        msg = n.error("boom")
        renderer.render.assert_called_once_with(msg)

    def test_console_output_disabled(self):
        assert Notifier(console_output=False)._renderer is None

    def test_console_output_builds_rich_renderer(self):
        assert isinstance(Notifier(console_output=True)._renderer, RichConsoleRenderer)


class TestDefaultNotifier:
    """Tests for the process-wide default notifier."""

    def test_get_notifier_is_shared(self):
        assert get_notifier() is get_notifier()

    def test_reset_notifier_builds_new_instance(self):
        first = get_notifier()
        reset_notifier()
        assert get_notifier() is not first

    def test_emit_helpers_use_default(self):
        emit_info("i")
        emit_success("s")
        emit_warning("w")
        emit_error("e")
        levels = [m.level for m in get_notifier().recent()]
        assert levels == [
            MessageLevel.INFO,
            MessageLevel.SUCCESS,
            MessageLevel.WARNING,
            MessageLevel.ERROR,
        ]

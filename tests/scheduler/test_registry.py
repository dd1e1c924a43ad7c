"""Tests for the lock-guarded task registry."""

import threading

import pytest

from taskhound.messaging import MessageLevel
from taskhound.scheduler.recurrence import Daily, FrequencyUnit, Frequently
from taskhound.scheduler.registry import RESET_MESSAGE, TaskRegistry
from taskhound.scheduler.task import ScheduledTask


@pytest.fixture
def registry(notifier):
    return TaskRegistry(notifier)


def make_task(name="job", next_run_at=100):
    return ScheduledTask(
        name=name,
        rule=Frequently(FrequencyUnit.SECONDS, 1),
        callback=lambda: None,
        next_run_at=next_run_at,
    )


class TestGetPut:
    """Tests for lookup and insertion."""

    def test_get_missing_returns_none(self, registry):
        assert registry.get("nope") is None

    def test_put_then_get(self, registry):
        task = make_task()
        registry.put("job", task)
        assert registry.get("job") is task
        assert "job" in registry
        assert len(registry) == 1

    def test_put_replaces_existing(self, registry):
        registry.put("job", make_task(next_run_at=1))
        replacement = make_task(next_run_at=2)
        registry.put("job", replacement)
        assert registry.get("job") is replacement
        assert len(registry) == 1

    def test_snapshot_is_a_copy(self, registry):
        registry.put("a", make_task("a"))
        snap = registry.snapshot()
        registry.put("b", make_task("b"))
        assert [t.name for t in snap] == ["a"]
        assert sorted(registry.names()) == ["a", "b"]

    def test_concurrent_puts(self, registry):
        def worker(prefix):
            for i in range(200):
                registry.put(f"{prefix}-{i}", make_task(f"{prefix}-{i}"))

        threads = [threading.Thread(target=worker, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 800


class TestReschedule:
    """Tests for the compare-and-swap write back."""

    def test_updates_live_entry(self, registry):
        task = make_task(next_run_at=100)
        registry.put("job", task)

        updated = registry.reschedule(task, 105, 100)

        assert updated is registry.get("job")
        assert updated.next_run_at == 105
        assert updated.last_run_at == 100
        assert task.next_run_at == 100

    def test_skips_replaced_entry(self, registry):
        stale = make_task(next_run_at=100)
        registry.put("job", stale)
        fresh = ScheduledTask(name="job", rule=Daily(8, 0), next_run_at=999)
        registry.put("job", fresh)

        assert registry.reschedule(stale, 105, 100) is None
        assert registry.get("job") is fresh

    def test_skips_after_reset(self, registry):
        task = make_task()
        registry.put("job", task)
        registry.reset()

        assert registry.reschedule(task, 105, 100) is None
        assert len(registry) == 0


class TestReset:
    """Tests for clearing the registry."""

    def test_reset_clears_entries(self, registry):
        registry.put("a", make_task("a"))
        registry.put("b", make_task("b"))
        registry.reset()
        assert len(registry) == 0
        assert registry.get("a") is None

    def test_reset_emits_warning(self, registry, notifier):
        registry.reset()
        warnings = notifier.recent(MessageLevel.WARNING)
        assert [m.text for m in warnings] == [RESET_MESSAGE]

    def test_reset_on_empty_registry_still_warns(self, registry, notifier):
        registry.reset()
        registry.reset()
        assert len(notifier.recent(MessageLevel.WARNING)) == 2

    def test_falls_back_to_default_notifier(self):
        from taskhound.messaging import get_notifier

        TaskRegistry().reset()
        assert get_notifier().recent(MessageLevel.WARNING)[-1].text == RESET_MESSAGE

"""CLI subcommands for the scheduler.

Handles command-line operations: showing loop status, listing registered
tasks and running the scheduler in the foreground with a heartbeat task.
"""

import argparse
import threading
import time
from datetime import datetime
from typing import List, Optional

from taskhound.messaging import emit_info, emit_success, emit_warning
from taskhound.scheduler.daemon import LoopState, Scheduler, install_signal_handlers
from taskhound.scheduler.recurrence import describe_rule


def _fmt_ts(ts: int) -> str:
    if not ts:
        return "never"
    return datetime.fromtimestamp(ts).isoformat(sep=" ", timespec="seconds")


def handle_scheduler_status(scheduler: Scheduler) -> bool:
    """Show loop state and a one-line task summary."""
    state = scheduler.state
    if state == LoopState.RUNNING:
        emit_success(f"🐕 Scheduler loop: RUNNING (cadence {scheduler.cadence}s)")
    else:
        emit_warning(f"🐕 Scheduler loop: {state.value.upper()}")

    tasks = scheduler.tasks()
    active = sum(1 for t in tasks if t.next_run_at)
    emit_info(f"📅 Scheduled tasks: {len(tasks)} total, {active} with a pending run")
    return True


def handle_scheduler_list(scheduler: Scheduler) -> bool:
    """List all registered tasks."""
    tasks = sorted(scheduler.tasks(), key=lambda t: t.name)

    if not tasks:
        emit_info("No scheduled tasks registered.")
        return True

    emit_info(f"📅 Scheduled Tasks ({len(tasks)}):")
    for task in tasks:
        status = "🔴 misconfigured" if task.is_misconfigured else "🟢 scheduled"
        emit_info(f"  {task.name}")
        emit_info(f"      Status: {status}")
        emit_info(f"      Schedule: {describe_rule(task.rule)}")
        emit_info(f"      Next run: {_fmt_ts(task.next_run_at)}")
        emit_info(f"      Last run: {_fmt_ts(task.last_run_at)}")

    return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m taskhound.scheduler",
        description="Run the scheduler loop in the foreground with a heartbeat task",
    )
    parser.add_argument(
        "--heartbeat",
        type=int,
        default=5,
        help="Seconds between heartbeat runs (default: 5)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    scheduler = Scheduler()

    beats = {"count": 0}

    def heartbeat() -> None:
        beats["count"] += 1
        emit_success(f"heartbeat #{beats['count']}")

    scheduler.task("heartbeat").every_seconds(args.heartbeat).exec_func(heartbeat).commit()
    handle_scheduler_list(scheduler)

    if threading.current_thread() is threading.main_thread():
        install_signal_handlers(scheduler)

    if args.duration is not None:
        scheduler.start_background()
        time.sleep(max(0.0, args.duration))
        scheduler.stop()
    else:
        scheduler.run()

    handle_scheduler_status(scheduler)
    return 0

#!/usr/bin/env python3
"""
Basic Usage Examples for Schedule

This script demonstrates registering events and hooks on a schedule
and asking which events are due. Executing the events is left to the
runner; here they are only printed.
"""

import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

# Add parent directory to path for imports (if running as standalone script)
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskscheduler import Schedule, ScheduleSettings, setup_logging


def example_1_register_events():
    """Example 1: Register shell commands with parameters"""
    print("\n" + "=" * 60)
    print("Example 1: Register events")
    print("=" * 60)

    schedule = Schedule(ScheduleSettings(timezone="Europe/London"))

    schedule.run("backup.sh", [("--target", "/srv/backups"), "--verbose"]).daily_at("02:30")
    schedule.run("cleanup.sh").every_fifteen_minutes().describe("Remove stale temp files")
    schedule.run(lambda: print("heartbeat")).every_minute()

    for event in schedule.list_events():
        print(f"  {event.id}: {event.expression:15s} {event.summary_for_display()}")

    return schedule


def example_2_due_events(schedule: Schedule):
    """Example 2: Ask which events are due at a given time"""
    print("\n" + "=" * 60)
    print("Example 2: Due events at 02:30 London time")
    print("=" * 60)

    now = datetime(2024, 6, 3, 2, 30, tzinfo=ZoneInfo("Europe/London"))
    for event in schedule.due_events(now=now):
        print(f"  due: {event.summary_for_display()}")


def example_3_hooks_and_dismissal(schedule: Schedule):
    """Example 3: Hooks run by the runner, then dismissal"""
    print("\n" + "=" * 60)
    print("Example 3: Hooks and dismissal")
    print("=" * 60)

    schedule.before(lambda: print("  starting tick")) \
        .then(lambda: print("  tick finished")) \
        .on_error(lambda: print("  tick failed"))

    for hook in schedule.before_callbacks():
        hook()

    for event in schedule.due_events():
        print(f"  would run: {event.summary_for_display()}")
        schedule.dismiss_event(event.id)

    for hook in schedule.after_callbacks():
        hook()

    print(f"  {len(schedule)} event(s) left")


def main():
    setup_logging()
    schedule = example_1_register_events()
    example_2_due_events(schedule)
    example_3_hooks_and_dismissal(schedule)


if __name__ == "__main__":
    main()

"""
Task Scheduler Registry

An in-process registry for cron-like task scheduling: register shell
commands or callables as events, attach lifecycle hooks, and ask which
events are due so an external runner can execute them.

Features:
- Fluent event registration with crontab expressions
- Shell-safe compilation of command parameters
- Ordered before/after/error hooks
- Timezone-aware due checks (APScheduler cron triggers)
- Unique event ids per schedule
"""

from taskscheduler.schedule import Schedule, ScheduleError, EventIdCollisionError
from taskscheduler.event import Event
from taskscheduler.parameters import compile_parameters
from taskscheduler.config import SchedulerConfig, ScheduleSettings, LoggingConfig, get_settings, set_settings
from taskscheduler.logs import setup_logging

__version__ = "0.1.0"
__all__ = [
    "Schedule",
    "ScheduleError",
    "EventIdCollisionError",
    "Event",
    "compile_parameters",
    "SchedulerConfig",
    "ScheduleSettings",
    "LoggingConfig",
    "get_settings",
    "set_settings",
    "setup_logging",
]

"""
Schedulable events.

An event pairs a unique id with a unit of work (a shell command string or
a zero-argument callable) and a crontab expression. Due-ness is evaluated
with APScheduler's cron trigger in a given timezone.

Crontab semantics are kept on top of APScheduler:
- Day-of-week 0 and 7 are Sunday (APScheduler 3.x counts from Monday)
- A restricted day-of-month and day-of-week match when either matches
- Macros such as @daily and @hourly are expanded
"""

import logging
import re
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Any, Callable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger

from taskscheduler.pingable import PingableMixin

logger = logging.getLogger(__name__)

Command = Union[str, Callable[[], Any]]
TimeZone = Union[str, tzinfo]

DEFAULT_EXPRESSION = "* * * * *"

CRON_MACROS = {
    '@yearly': '0 0 1 1 *',
    '@annually': '0 0 1 1 *',
    '@monthly': '0 0 1 * *',
    '@weekly': '0 0 * * 0',
    '@daily': '0 0 * * *',
    '@midnight': '0 0 * * *',
    '@hourly': '0 * * * *',
}

# Crontab numbering: 0 and 7 are both Sunday
_CRON_WEEKDAYS = ('sun', 'mon', 'tue', 'wed', 'thu', 'fri', 'sat')

_DAY_NAMES = {
    'sunday': 0, 'monday': 1, 'tuesday': 2, 'wednesday': 3,
    'thursday': 4, 'friday': 5, 'saturday': 6,
}


def to_timezone(value: TimeZone) -> tzinfo:
    """
    Interpret a timezone name or tzinfo.

    Raises:
        ValueError: If the name is not a known IANA timezone
    """
    if isinstance(value, tzinfo):
        return value
    if value == 'UTC':
        return dt_timezone.utc
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {value!r}") from e


def _crontab_day_of_week(field: str) -> str:
    """Rewrite a crontab day-of-week field using weekday names."""
    if field in ('*', '?'):
        return '*'

    def day_number(token: str) -> int:
        if token[:3] in _CRON_WEEKDAYS and re.fullmatch('[a-z]+', token):
            return _CRON_WEEKDAYS.index(token[:3])
        return int(token)

    days = []
    for part in field.lower().split(','):
        base, _, step = part.partition('/')
        try:
            if base == '*':
                first, last = 0, 6
            elif '-' in base:
                first, last = (day_number(v) for v in base.split('-', 1))
            else:
                first = day_number(base)
                last = 6 if step else first
            increment = int(step) if step else 1
        except ValueError as e:
            raise ValueError(f"Invalid day of week: {part!r}") from e

        if not (0 <= first <= last <= 7) or increment < 1:
            raise ValueError(f"Invalid day of week: {part!r}")

        days.extend(
            _CRON_WEEKDAYS[day % 7] for day in range(first, last + 1, increment)
        )

    return ','.join(dict.fromkeys(days))


def build_trigger(expression: str, timezone: TimeZone) -> BaseTrigger:
    """
    Build an APScheduler trigger from a crontab expression.

    Args:
        expression: 5-field crontab expression or macro (e.g. "@daily")
        timezone: Timezone the expression is evaluated in

    Returns:
        CronTrigger, or an OrTrigger when both day fields are restricted

    Raises:
        ValueError: If the expression is invalid
    """
    expression = CRON_MACROS.get(expression.strip().lower(), expression)
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(
            f"Invalid cron expression {expression!r}: "
            f"expected 5 fields, got {len(fields)}"
        )

    minute, hour, day, month, day_of_week = fields
    day = '*' if day == '?' else day
    day_of_week = _crontab_day_of_week(day_of_week)
    tz = to_timezone(timezone)

    def cron(day: str, day_of_week: str) -> CronTrigger:
        return CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month.lower(),
            day_of_week=day_of_week,
            timezone=tz
        )

    if day != '*' and day_of_week != '*':
        return OrTrigger([cron(day, '*'), cron('*', day_of_week)])
    return cron(day, day_of_week)


class Event(PingableMixin):
    """
    A schedulable unit of work.

    The id is assigned by the owning Schedule and never changes. The
    frequency helpers rewrite one crontab field at a time and return the
    event, so they can be chained:

        schedule.run('backup.sh').daily_at('02:30').weekdays()
    """

    def __init__(self, id: str, command: Command):
        """
        Initialize event.

        Args:
            id: Unique identifier within the owning schedule
            command: Shell command string or zero-argument callable
        """
        if not isinstance(command, str) and not callable(command):
            raise TypeError(
                f"Event command must be a string or callable, got {type(command).__name__}"
            )

        self._id = id
        self.command = command
        self.expression = DEFAULT_EXPRESSION
        self.description: Optional[str] = None
        self.timezone: Optional[TimeZone] = None
        self.working_dir: Optional[str] = None
        self.run_as: Optional[str] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_closure(self) -> bool:
        """True when the command is a callable rather than a shell string."""
        return callable(self.command)

    def summary_for_display(self) -> str:
        """Short label for logs: description, command, or callable name."""
        if self.description:
            return self.description
        if self.is_closure:
            return f"callable {getattr(self.command, '__qualname__', repr(self.command))}"
        return self.command

    # Due-ness

    def is_due(self, timezone: TimeZone, now: Optional[datetime] = None) -> bool:
        """
        Check whether the expression matches the current minute.

        The event's own timezone, when set, takes precedence over the
        timezone argument.

        Args:
            timezone: Fallback IANA timezone name or tzinfo
            now: Aware datetime to evaluate instead of the current time

        Returns:
            True if the event should run in this minute

        Raises:
            ValueError: If now is a naive datetime
        """
        minute = self._current_minute(timezone, now)
        trigger = build_trigger(self.expression, minute.tzinfo)
        return trigger.get_next_fire_time(None, minute) == minute

    def next_run_date(
        self,
        timezone: TimeZone,
        now: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Get the next fire time at or after the current minute."""
        minute = self._current_minute(timezone, now)
        trigger = build_trigger(self.expression, minute.tzinfo)
        return trigger.get_next_fire_time(None, minute)

    def _current_minute(self, timezone: TimeZone, now: Optional[datetime]) -> datetime:
        if now is not None and (now.tzinfo is None or now.utcoffset() is None):
            raise ValueError(f"now must be timezone-aware, got naive {now.isoformat()}")
        tz = to_timezone(self.timezone or timezone)
        current = now.astimezone(tz) if now else datetime.now(tz)
        return current.replace(second=0, microsecond=0)

    # Expression

    def cron(self, expression: str) -> 'Event':
        """
        Set the crontab expression.

        Raises:
            ValueError: If the expression is invalid
        """
        build_trigger(expression, 'UTC')
        self.expression = expression
        return self

    def _splice_into_position(self, position: int, value: Any) -> 'Event':
        """Replace one field (1 = minute ... 5 = day of week) of the expression."""
        expression = CRON_MACROS.get(self.expression.strip().lower(), self.expression)
        segments = expression.split()
        segments[position - 1] = str(value)
        return self.cron(' '.join(segments))

    def every_minute(self) -> 'Event':
        return self.cron(DEFAULT_EXPRESSION)

    def every_n_minutes(self, minutes: int) -> 'Event':
        if minutes < 1:
            raise ValueError(f"Minute interval must be positive, got {minutes}")
        return self._splice_into_position(1, '*' if minutes == 1 else f'*/{minutes}')

    def every_five_minutes(self) -> 'Event':
        return self.every_n_minutes(5)

    def every_fifteen_minutes(self) -> 'Event':
        return self.every_n_minutes(15)

    def every_thirty_minutes(self) -> 'Event':
        return self.every_n_minutes(30)

    def hourly(self) -> 'Event':
        return self._splice_into_position(1, 0)

    def hourly_at(self, minute: int) -> 'Event':
        return self._splice_into_position(1, minute)

    def daily(self) -> 'Event':
        return self._splice_into_position(1, 0)._splice_into_position(2, 0)

    def daily_at(self, time: str) -> 'Event':
        """
        Run daily at the given time.

        Args:
            time: "HH:MM" or "HH"
        """
        hour, _, minute = time.partition(':')
        try:
            hour_value, minute_value = int(hour), int(minute or 0)
        except ValueError as e:
            raise ValueError(f"Invalid time {time!r}, expected HH:MM") from e
        if not (0 <= hour_value <= 23 and 0 <= minute_value <= 59):
            raise ValueError(f"Invalid time {time!r}, expected HH:MM")

        return self._splice_into_position(2, hour_value)._splice_into_position(1, minute_value)

    at = daily_at

    def twice_daily(self, first: int = 1, second: int = 13) -> 'Event':
        return self._splice_into_position(1, 0)._splice_into_position(2, f'{first},{second}')

    def weekly(self) -> 'Event':
        return self.cron('0 0 * * 0')

    def monthly(self) -> 'Event':
        return self.cron('0 0 1 * *')

    def quarterly(self) -> 'Event':
        return self.cron('0 0 1 */3 *')

    def yearly(self) -> 'Event':
        return self.cron('0 0 1 1 *')

    def minute(self, value: Any) -> 'Event':
        return self._splice_into_position(1, value)

    def hour(self, value: Any) -> 'Event':
        return self._splice_into_position(2, value)

    def on(self, day_of_month: Any) -> 'Event':
        return self._splice_into_position(3, day_of_month)

    def days(self, *days: Union[int, str]) -> 'Event':
        """
        Restrict to days of the week.

        Args:
            days: Crontab day numbers (0 = Sunday) or day names
        """
        if not days:
            raise ValueError("At least one day is required")
        values = []
        for day in days:
            if isinstance(day, str) and day.lower() in _DAY_NAMES:
                day = _DAY_NAMES[day.lower()]
            values.append(str(day))
        return self._splice_into_position(5, ','.join(values))

    def weekdays(self) -> 'Event':
        return self._splice_into_position(5, '1-5')

    def weekends(self) -> 'Event':
        return self._splice_into_position(5, '6,0')

    def mondays(self) -> 'Event':
        return self.days(1)

    def tuesdays(self) -> 'Event':
        return self.days(2)

    def wednesdays(self) -> 'Event':
        return self.days(3)

    def thursdays(self) -> 'Event':
        return self.days(4)

    def fridays(self) -> 'Event':
        return self.days(5)

    def saturdays(self) -> 'Event':
        return self.days(6)

    def sundays(self) -> 'Event':
        return self.days(0)

    # Metadata

    def describe(self, description: str) -> 'Event':
        self.description = description
        return self

    def in_directory(self, path: str) -> 'Event':
        self.working_dir = path
        return self

    def in_timezone(self, timezone: TimeZone) -> 'Event':
        """Evaluate this event in its own timezone."""
        to_timezone(timezone)
        self.timezone = timezone
        return self

    def user(self, name: str) -> 'Event':
        self.run_as = name
        return self

    def __repr__(self):
        return (
            f"Event(id={self.id!r}, expression={self.expression!r}, "
            f"command={self.summary_for_display()!r})"
        )

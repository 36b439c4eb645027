"""
Schedule: the in-process registry of events and lifecycle hooks.

Callers register events with run() and hooks with before()/then()/on_error().
A runner then asks due_events() once per tick, executes each event while
invoking the hooks, and retires it with dismiss_event().

Events are keyed by their generated id, which is unique for the lifetime
of the Schedule. The Schedule is not thread-safe; hosts driving it from
several threads must guard it themselves.
"""

import inspect
import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set

from taskscheduler.config import ScheduleSettings, get_settings
from taskscheduler.event import Command, Event, TimeZone
from taskscheduler.parameters import Parameters, compile_parameters
from taskscheduler.pingable import PingableMixin

logger = logging.getLogger(__name__)

Hook = Callable[[], Any]


class ScheduleError(Exception):
    """Base class for schedule errors."""
    pass


class EventIdCollisionError(ScheduleError):
    """Raised when no unused event id can be generated."""
    pass


def _check_hook(hook: Hook) -> Hook:
    """Ensure a hook is callable without arguments."""
    if not callable(hook):
        raise TypeError(f"Hook must be callable, got {type(hook).__name__}")

    try:
        signature = inspect.signature(hook)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return hook

    required = [
        p.name for p in signature.parameters.values()
        if p.default is p.empty
        and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    ]
    if required:
        raise TypeError(
            f"Hook {hook!r} must take no required arguments, "
            f"got: {', '.join(required)}"
        )
    return hook


class Schedule(PingableMixin):
    """
    Registry of scheduled events and their lifecycle hooks.

    Usage:
        schedule = Schedule()
        schedule.run('backup.sh', ['--target', '/srv']).daily_at('02:00')
        schedule.before(notify_start).then(notify_done)

        for event in schedule.due_events('Europe/Berlin'):
            ...
            schedule.dismiss_event(event.id)
    """

    def __init__(
        self,
        settings: Optional[ScheduleSettings] = None,
        id_factory: Optional[Callable[[], str]] = None
    ):
        """
        Initialize schedule.

        Args:
            settings: Schedule settings (defaults to the process-wide settings)
            id_factory: Returns candidate event ids (defaults to prefix + random hex)

        Raises:
            ValueError: If settings.max_id_attempts is less than 1
        """
        self.settings = settings or get_settings()
        if self.settings.max_id_attempts < 1:
            raise ValueError(
                f"max_id_attempts must be at least 1, got {self.settings.max_id_attempts}"
            )
        self._id_factory = id_factory or self._random_id
        self._events: Dict[str, Event] = {}
        self._issued_ids: Set[str] = set()
        self._before_callbacks: List[Hook] = []
        self._after_callbacks: List[Hook] = []
        self._error_callbacks: List[Hook] = []

    # Registration

    def run(self, command: Command, parameters: Optional[Parameters] = None) -> Event:
        """
        Add a new event to the schedule.

        Args:
            command: Shell command string or zero-argument callable
            parameters: Values or (name, value) pairs appended to a string command

        Returns:
            The registered event, for further configuration
        """
        if isinstance(command, str) and parameters:
            command = f"{command} {compile_parameters(parameters)}"

        event = Event(self._generate_id(), command)
        self._events[event.id] = event

        logger.debug(f"Registered event {event.id}: {event.summary_for_display()}")
        return event

    def before(self, callback: Hook) -> 'Schedule':
        """Register a callback to be called before the events run."""
        self._before_callbacks.append(_check_hook(callback))
        return self

    def then(self, callback: Hook) -> 'Schedule':
        """Register a callback to be called after the events finish."""
        self._after_callbacks.append(_check_hook(callback))
        return self

    def after(self, callback: Hook) -> 'Schedule':
        """Alias of then()."""
        return self.then(callback)

    def on_error(self, callback: Hook) -> 'Schedule':
        """Register a callback to call in case of an error."""
        self._error_callbacks.append(_check_hook(callback))
        return self

    def before_callbacks(self) -> List[Hook]:
        return list(self._before_callbacks)

    def after_callbacks(self) -> List[Hook]:
        return list(self._after_callbacks)

    def error_callbacks(self) -> List[Hook]:
        return list(self._error_callbacks)

    # Registry

    def list_events(self) -> List[Event]:
        """Get all events in registration order."""
        return list(self._events.values())

    def replace_events(self, events: Iterable[Event]) -> List[Event]:
        """
        Replace the whole registry.

        Args:
            events: New events, keyed by their ids

        Returns:
            The new events in order

        Raises:
            ValueError: If two events share an id
        """
        replacement: Dict[str, Event] = {}
        for event in events:
            if event.id in replacement:
                raise ValueError(f"Duplicate event id: {event.id}")
            replacement[event.id] = event

        self._events = replacement
        self._issued_ids.update(replacement)
        logger.debug(f"Replaced registry with {len(replacement)} event(s)")
        return list(replacement.values())

    def get_event(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    def due_events(
        self,
        timezone: Optional[TimeZone] = None,
        now: Optional[datetime] = None
    ) -> List[Event]:
        """
        Get the events that are due, in registration order.

        Args:
            timezone: IANA timezone name or tzinfo (defaults to settings.timezone)
            now: Aware datetime to evaluate instead of the current time

        Returns:
            Due events (possibly empty)

        Raises:
            ValueError: If now is a naive datetime
        """
        timezone = timezone or self.settings.timezone
        due = [event for event in self._events.values() if event.is_due(timezone, now)]
        logger.debug(f"{len(due)} of {len(self._events)} event(s) due in {timezone}")
        return due

    def dismiss_event(self, event_id: str) -> 'Schedule':
        """
        Dismiss an event after it is finished.

        Dismissing an unknown id is a no-op.
        """
        if self._events.pop(event_id, None) is None:
            logger.debug(f"Event {event_id} not registered, nothing to dismiss")
        else:
            logger.debug(f"Dismissed event {event_id}")
        return self

    # Ids

    def _random_id(self) -> str:
        return f"{self.settings.id_prefix}{uuid.uuid4().hex}"

    def _generate_id(self) -> str:
        """
        Generate an event id not used in this schedule.

        Raises:
            EventIdCollisionError: If every attempt collides
        """
        attempts = self.settings.max_id_attempts
        for attempt in range(1, attempts + 1):
            candidate = self._id_factory()
            if candidate not in self._events and candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
            logger.warning(f"Event id collision on {candidate} (attempt {attempt}/{attempts})")

        raise EventIdCollisionError(
            f"Could not generate a unique event id after {attempts} attempts"
        )

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events.values()))

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __repr__(self):
        return f"Schedule(events={len(self._events)})"

"""
Commandant events: ordered callbacks for parse outcomes.

The parser never calls back into user code; the dispatcher (Command.run)
turns each outcome into an Event and emits it here. Listeners run in
ascending priority, ties keep their registration order.

Priorities
- before_all   -5
- default      -4 (installed by the command; removed by override())
- before_help  -4
- on()          0 unless given
- after_help    4
- after_all     5
"""
import collections
import enum
import logging

from .faults import FaultCode

logger = logging.getLogger(__name__)

BEFORE_ALL = -5
DEFAULT = -4
BEFORE_HELP = -4
AFTER_HELP = 4
AFTER_ALL = 5


class Event(enum.Enum):
    MISSING_REQUIRED_ARGUMENT = "missing-required-argument"
    OUTPUT_HELP = "output-help"
    OUTPUT_VERSION = "output-version"
    UNKNOWN_COMMAND = "unknown-command"
    UNKNOWN_OPTION = "unknown-option"
    UNRESOLVED_ARGUMENT = "unresolved-argument"
    INVALID_ARGUMENT_VALUE = "invalid-argument-value"
    MISSING_REQUIRED_OPTION = "missing-required-option"

    @classmethod
    def of(cls, fault, /):
        """the event emitted for a fault (matched on its code)."""
        return cls[FaultCode(fault.code).name]

    @property
    def failure(self):
        return self not in (Event.OUTPUT_HELP, Event.OUTPUT_VERSION)


EventContext = collections.namedtuple(
    "EventContext",
    ("event", "command", "tokens", "matches", "fault", "exit_code"),
    defaults=(None, None, 0),
)
"""what a listener receives: the event, the command it concerns, the raw
tokens, and either the matches (help/version) or the fault (errors)."""

Listener = collections.namedtuple("Listener", ("callback", "priority", "default"))


class EventEmitter:
    def __init__(self):
        self._listeners = collections.defaultdict(list)
        self._overridden = set()

    def on(self, event, callback, /, priority=0, *, default=False):
        if not isinstance(event, Event):
            raise TypeError("on() first argument must be an event")
        if not callable(callback):
            raise TypeError("on() second argument must be callable")
        if default and event in self._overridden:
            return callback
        self._listeners[event].append(Listener(callback, priority, bool(default)))
        return callback

    def override(self, event, /):
        """drop the default listener(s) of event, now and for later registrations."""
        self._overridden.add(event)
        self._listeners[event] = [listener for listener in self._listeners[event] if not listener.default]

    def before_all(self, callback, /):
        for event in Event:
            self.on(event, callback, BEFORE_ALL)
        return callback

    def after_all(self, callback, /):
        for event in Event:
            self.on(event, callback, AFTER_ALL)
        return callback

    def before_help(self, callback, /):
        return self.on(Event.OUTPUT_HELP, callback, BEFORE_HELP)

    def after_help(self, callback, /):
        return self.on(Event.OUTPUT_HELP, callback, AFTER_HELP)

    def listeners(self, event, /):
        return tuple(sorted(self._listeners[event], key=lambda listener: listener.priority))

    def emit(self, context, /):
        listeners = self.listeners(context.event)
        logger.debug("emitting %s to %d listener(s)", context.event.value, len(listeners))
        for listener in listeners:
            listener.callback(context)
        return len(listeners)


__all__ = (
    "Event",
    "EventContext",
    "EventEmitter",
)

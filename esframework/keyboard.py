"""Keyboard input service: type event numbers to inject events by hand.

Characters arrive as ES_KEYINPUT events.  A command is collected up to the
terminating ``;`` and has the form ``EVENTNUM;`` or ``EVENTNUM->PARAMHEX;``.
The resulting event is handed to the target post function.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, TextIO

from .events import Event, EventType, event_name
from .queue import QueueFullError

if TYPE_CHECKING:
    from .framework import Framework

COMMAND_STRING_LENGTH = 20
TERMINATION_CHARACTER = ";"
NUMBER_OF_EVENTS = len(EventType)

_EVENT_NUMBER = re.compile(r"\s*([+-]?\d+)")
_EVENT_PARAM = re.compile(r"\s*->\s*([+-]?(?:0[xX](?=[0-9A-Fa-f]))?[0-9A-Fa-f]+)")

PostFunction = Callable[[Event], Any]


def parse_command(command: str) -> Optional[tuple[int, int]]:
    """Parse ``EVENTNUM`` or ``EVENTNUM -> PARAMHEX`` at the start of a command.

    Returns the event number and parameter (0 when none is given), or None
    if the command does not start with an event number.
    """
    number = _EVENT_NUMBER.match(command)
    if number is None:
        return None
    event_number = int(number.group(1))
    param = _EVENT_PARAM.match(command, number.end())
    if param is None:
        return event_number, 0
    return event_number, int(param.group(1), 16)


def format_event_list() -> str:
    """Return the listing of every event number and name, three to a line."""
    parts = ["\r\nPrinting all events available in the system\n"]
    for event_type in EventType:
        parts.append(f"{int(event_type):2d}: {event_type.name:<25s}")
        if (int(event_type) + 3) % 3 == 0:
            parts.append("\r\n")
    parts.append("\n")
    return "".join(parts)


def _target_name(target: PostFunction) -> str:
    return getattr(target, "__name__", repr(target))


class KeyboardInput:
    """A service turning typed commands into events for ``target``."""

    def __init__(self, target: PostFunction, output: Optional[TextIO] = None) -> None:
        self.target = target
        self.output = output if output is not None else sys.stdout
        self.framework: Optional["Framework"] = None
        self.priority = 0
        self._command = ""

    @property
    def command(self) -> str:
        """The characters collected for the command being typed."""
        return self._command

    def init(self, framework: "Framework", priority: int) -> bool:
        """Remember the framework and post ES_INIT to this service's queue."""
        self.framework = framework
        self.priority = priority
        try:
            self.post(Event(EventType.ES_INIT, 0))
        except QueueFullError:
            return False
        return True

    def post(self, event: Event) -> None:
        """Post an event to this service's queue."""
        if self.framework is None:
            raise RuntimeError("keyboard input has not been initialised")
        self.framework.post_to_service(self.priority, event)

    def run(self, event: Event) -> Event:
        """Handle ES_INIT and ES_KEYINPUT events; always returns ES_NO_EVENT."""
        if event.type == EventType.ES_INIT:
            self._command = ""
            self.output.write(format_event_list())
            self.output.write(
                "\r\n\r\nKeyboard input is active, "
                "no other events except timer activations will be processed. "
                "You can redisplay the event list by sending a "
                f"{int(EventType.ES_LISTEVENTS)} event.\r\n"
                "Send an event using the form [event#]; "
                "or [event#]->[EventParam];\r\n"
            )
        elif event.type == EventType.ES_KEYINPUT and 0 <= event.param < 127:
            character = chr(event.param)
            if len(self._command) < COMMAND_STRING_LENGTH:
                self._command += character
            if character == TERMINATION_CHARACTER:
                self._execute(self._command)
                self._command = ""
        return Event(EventType.ES_NO_EVENT, 0)

    def _execute(self, command: str) -> None:
        parsed = parse_command(command)
        if parsed is None:
            return
        number, param = parsed
        if not 0 <= number < NUMBER_OF_EVENTS:
            self.output.write(f"\r\nEvent #{number} is Invalid, Please try again\r\n")
            return
        event_type = EventType(number)
        if event_type == EventType.ES_LISTEVENTS:
            self.output.write(format_event_list())
            return
        self.output.write(
            f"\r\n{event_name(event_type)} with parameter {param:X} "
            f"was passed to {_target_name(self.target)}"
        )
        self.target(Event(event_type, param))
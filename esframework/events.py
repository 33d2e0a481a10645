"""Event types and the event record passed between services and state machines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class EventType(IntEnum):
    """Every event the framework and the robot's checkers can produce.

    The framework's own events occupy the lowest values, followed by the
    events raised by the sensor checkers.
    """

    ES_NO_EVENT = 0
    ES_ERROR = 1
    ES_INIT = 2
    ES_ENTRY = 3
    ES_EXIT = 4
    ES_KEYINPUT = 5
    ES_LISTEVENTS = 6
    ES_TIMEOUT = 7
    ES_TIMERACTIVE = 8
    ES_TIMERSTOPPED = 9
    FRONT_WIRE_HIGH = 10
    FRONT_WIRE_LOW = 11
    BACK_WIRE_HIGH = 12
    BACK_WIRE_LOW = 13
    CLOSE_FRONT_WIRE_HIGH = 14
    CLOSE_FRONT_WIRE_LOW = 15
    CLOSE_BACK_WIRE_HIGH = 16
    CLOSE_BACK_WIRE_LOW = 17
    BEACON_LOST = 18
    BEACON_FOUND = 19
    FL_BUMPER_UP = 20
    FL_BUMPER_DOWN = 21
    FR_BUMPER_UP = 22
    FR_BUMPER_DOWN = 23
    RL_BUMPER_UP = 24
    RL_BUMPER_DOWN = 25
    RR_BUMPER_UP = 26
    RR_BUMPER_DOWN = 27
    FL_TAPE_OFF = 28
    FR_TAPE_OFF = 29
    RL_TAPE_OFF = 30
    RR_TAPE_OFF = 31
    LH_TAPE_OFF = 32
    RH_TAPE_OFF = 33
    FL_TAPE_ON = 34
    FR_TAPE_ON = 35
    RL_TAPE_ON = 36
    RR_TAPE_ON = 37
    LH_TAPE_ON = 38
    RH_TAPE_ON = 39
    BATTERY_CONNECTED = 40
    BATTERY_DISCONNECTED = 41


@dataclass(frozen=True)
class Event:
    """An event: its type and a single integer parameter."""

    type: EventType
    param: int = 0


def event_name(event_type: int) -> str:
    """Return the symbolic name of an event type.

    Raises ValueError if the value is not a known event type.
    """
    return EventType(event_type).name
"""Event checkers that turn raw sensor readings into debounced events.

Each checker is called repeatedly by the framework.  A reading must differ
from the last reported state for more than a set number of calls in a row
before the change is reported, so that noise on a sensor does not produce
a burst of events.  A checker returns True when it posted an event.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .events import Event, EventType

TRACK_WIRE_CONSENSUS = 10
BUMPER_CONSENSUS_THRESHOLD = 200
BEACON_CONSENSUS_THRESHOLD = 100
TAPE_HIGH_CONSENSUS_THRESHOLD = 100
TAPE_LOW_CONSENSUS_THRESHOLD = 50
SIDE_TAPE_CONSENSUS_THRESHOLD = 5

BACK_LOWER_BOUND = 400
BACK_UPPER_BOUND = 800
FRONT_LOWER_BOUND = 300
FRONT_UPPER_BOUND = 800
FRONT_LOWER_CLOSE = 800
FRONT_UPPER_CLOSE = 900
BACK_LOWER_CLOSE = 800
BACK_UPPER_CLOSE = 900

PostFunction = Callable[[Event], Any]
Reading = Callable[[], Any]


@dataclass
class Sensors:
    """The robot's sensor readings, each a function of no arguments."""

    front_track_wire: Callable[[], int]
    back_track_wire: Callable[[], int]
    beacon: Reading
    front_left_bumper: Reading
    front_right_bumper: Reading
    back_left_bumper: Reading
    back_right_bumper: Reading
    front_left_tape: Reading
    front_right_tape: Reading
    back_left_tape: Reading
    back_right_tape: Reading
    left_hole_tape: Reading
    right_hole_tape: Reading


class TrackWireChecker:
    """Reports an analogue track-wire reading crossing its high or low bound.

    Readings between the bounds keep the last reported state.  The event
    carries the reading that confirmed the change.  With
    ``reset_after_event`` false the count of differing readings is left as
    it was after an event, so a change straight back is reported at once.
    """

    def __init__(
        self,
        read: Callable[[], int],
        post: PostFunction,
        low_bound: int,
        high_bound: int,
        low_event: EventType,
        high_event: EventType,
        reset_after_event: bool = True,
    ) -> None:
        self.read = read
        self.post = post
        self.low_bound = low_bound
        self.high_bound = high_bound
        self.low_event = low_event
        self.high_event = high_event
        self.reset_after_event = reset_after_event
        self.last_event = low_event
        self._consensus = 0

    def __call__(self) -> bool:
        reading = self.read()
        current = self.last_event
        if reading > self.high_bound:
            current = self.high_event
        elif reading < self.low_bound:
            current = self.low_event

        if current == self.last_event:
            self._consensus = 0
            return False

        self._consensus += 1
        if self._consensus <= TRACK_WIRE_CONSENSUS:
            return False
        if self.reset_after_event:
            self._consensus = 0
        self.last_event = current
        self.post(Event(current, reading))
        return True


class BinarySensorChecker:
    """Debounces a group of on/off sensors, one event per confirmed change.

    ``reads``, ``on_events`` and ``off_events`` run in parallel, one entry
    per sensor.  A change to on must be seen more than ``on_threshold``
    times, a change to off more than ``off_threshold`` times.  With
    ``reset_when_steady`` false, differing readings are counted even when
    they are not consecutive.
    """

    def __init__(
        self,
        reads: Sequence[Reading],
        post: PostFunction,
        on_events: Sequence[EventType],
        off_events: Sequence[EventType],
        on_threshold: int,
        off_threshold: int,
        reset_when_steady: bool = True,
    ) -> None:
        if not len(reads) == len(on_events) == len(off_events):
            raise ValueError("reads, on_events and off_events must match in length")
        self.reads = list(reads)
        self.post = post
        self.on_events = list(on_events)
        self.off_events = list(off_events)
        self.on_threshold = on_threshold
        self.off_threshold = off_threshold
        self.reset_when_steady = reset_when_steady
        self._last = [False] * len(self.reads)
        self._consensus = [0] * len(self.reads)

    @property
    def states(self) -> tuple[bool, ...]:
        """The last reported state of each sensor."""
        return tuple(self._last)

    def __call__(self) -> bool:
        found = False
        for index, read in enumerate(self.reads):
            current = bool(read())
            if current != self._last[index]:
                self._consensus[index] += 1
            elif self.reset_when_steady:
                self._consensus[index] = 0

            threshold = self.on_threshold if current else self.off_threshold
            if self._consensus[index] > threshold:
                self._last[index] = current
                self._consensus[index] = 0
                event_type = (
                    self.on_events[index] if current else self.off_events[index]
                )
                found = True
                self.post(Event(event_type, 0))
        return found


class BeaconChecker:
    """Reports the beacon being found or lost once the reading holds steady."""

    def __init__(
        self,
        read: Reading,
        post: PostFunction,
        threshold: int = BEACON_CONSENSUS_THRESHOLD,
    ) -> None:
        self.read = read
        self.post = post
        self.threshold = threshold
        self.last_event = EventType.BEACON_LOST
        self._time = 0

    def __call__(self) -> bool:
        detected = bool(self.read())
        found = self.last_event == EventType.BEACON_FOUND
        if detected == found:
            self._time = 0
            return False
        self._time += 1
        if self._time <= self.threshold:
            return False
        self._time = 0
        self.last_event = EventType.BEACON_FOUND if detected else EventType.BEACON_LOST
        self.post(Event(self.last_event, 0))
        return True


def make_default_checkers(
    sensors: Sensors, post: PostFunction
) -> list[Callable[[], bool]]:
    """Build the robot's checkers, in the order the framework polls them."""
    return [
        TrackWireChecker(
            sensors.front_track_wire,
            post,
            FRONT_LOWER_BOUND,
            FRONT_UPPER_BOUND,
            EventType.FRONT_WIRE_LOW,
            EventType.FRONT_WIRE_HIGH,
            reset_after_event=False,
        ),
        TrackWireChecker(
            sensors.back_track_wire,
            post,
            BACK_LOWER_BOUND,
            BACK_UPPER_BOUND,
            EventType.BACK_WIRE_LOW,
            EventType.BACK_WIRE_HIGH,
            reset_after_event=True,
        ),
        BeaconChecker(sensors.beacon, post, BEACON_CONSENSUS_THRESHOLD),
        BinarySensorChecker(
            [
                sensors.front_left_bumper,
                sensors.front_right_bumper,
                sensors.back_left_bumper,
                sensors.back_right_bumper,
            ],
            post,
            on_events=[
                EventType.FL_BUMPER_DOWN,
                EventType.FR_BUMPER_DOWN,
                EventType.RL_BUMPER_DOWN,
                EventType.RR_BUMPER_DOWN,
            ],
            off_events=[
                EventType.FL_BUMPER_UP,
                EventType.FR_BUMPER_UP,
                EventType.RL_BUMPER_UP,
                EventType.RR_BUMPER_UP,
            ],
            on_threshold=BUMPER_CONSENSUS_THRESHOLD,
            off_threshold=BUMPER_CONSENSUS_THRESHOLD,
            reset_when_steady=False,
        ),
        BinarySensorChecker(
            [
                sensors.front_left_tape,
                sensors.front_right_tape,
                sensors.back_left_tape,
                sensors.back_right_tape,
            ],
            post,
            on_events=[
                EventType.FL_TAPE_ON,
                EventType.FR_TAPE_ON,
                EventType.RL_TAPE_ON,
                EventType.RR_TAPE_ON,
            ],
            off_events=[
                EventType.FL_TAPE_OFF,
                EventType.FR_TAPE_OFF,
                EventType.RL_TAPE_OFF,
                EventType.RR_TAPE_OFF,
            ],
            on_threshold=TAPE_HIGH_CONSENSUS_THRESHOLD,
            off_threshold=TAPE_LOW_CONSENSUS_THRESHOLD,
            reset_when_steady=True,
        ),
        TrackWireChecker(
            sensors.front_track_wire,
            post,
            FRONT_LOWER_CLOSE,
            FRONT_UPPER_CLOSE,
            EventType.CLOSE_FRONT_WIRE_LOW,
            EventType.CLOSE_FRONT_WIRE_HIGH,
            reset_after_event=False,
        ),
        TrackWireChecker(
            sensors.back_track_wire,
            post,
            BACK_LOWER_CLOSE,
            BACK_UPPER_CLOSE,
            EventType.CLOSE_BACK_WIRE_LOW,
            EventType.CLOSE_BACK_WIRE_HIGH,
            reset_after_event=True,
        ),
        BinarySensorChecker(
            [sensors.left_hole_tape, sensors.right_hole_tape],
            post,
            on_events=[EventType.LH_TAPE_ON, EventType.RH_TAPE_ON],
            off_events=[EventType.LH_TAPE_OFF, EventType.RH_TAPE_OFF],
            on_threshold=SIDE_TAPE_CONSENSUS_THRESHOLD,
            off_threshold=SIDE_TAPE_CONSENSUS_THRESHOLD,
            reset_when_steady=True,
        ),
    ]
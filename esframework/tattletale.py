"""Call tracing for hierarchical state machines.

Each state machine records a point when it is entered with an event and
reports its tail when it returns.  Once the outermost machine has finished
handling an event, the collected trace is written out in one line.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, TextIO

from .events import Event, EventType, event_name

TATTLE_POINTS = 30


@dataclass(frozen=True)
class TattlePoint:
    """One recorded call: the machine, its state, the nesting depth and the event."""

    function_name: str
    state_name: str
    depth: int
    event: Event

    def __str__(self) -> str:
        return (
            f"{self.function_name}({self.state_name}"
            f"[{event_name(self.event.type)},{self.event.param:X}])"
        )


class TattleTale:
    """Collects trace points and writes a trace when a top-level call ends."""

    def __init__(self, output: Optional[TextIO] = None) -> None:
        self.output = output if output is not None else sys.stdout
        self._points: list[TattlePoint] = []
        self._depth = 0
        self._recursive_call = False
        self._recursive_count = 0

    @property
    def points(self) -> tuple[TattlePoint, ...]:
        """The points recorded since the last dump."""
        return tuple(self._points)

    @property
    def depth(self) -> int:
        """The current nesting depth of traced calls."""
        return self._depth

    def add_point(self, function_name: str, state_name: str, event: Event) -> None:
        """Record a call and note whether it is an exit during a transition."""
        if len(self._points) < TATTLE_POINTS:
            self._points.append(
                TattlePoint(function_name, state_name, self._depth, event)
            )
        if (
            event.type == EventType.ES_EXIT
            and self._points
            and self._points[0].function_name == function_name
        ):
            self._recursive_call = True
        self._depth += 1

    def check_tail(self, function_name: str) -> None:
        """Mark the end of a call, dumping the trace if the top level has finished."""
        self._depth -= 1
        if not self._points or self._points[0].function_name != function_name:
            return
        last = self._points[-1]
        if not self._recursive_call and last.event.type != EventType.ES_EXIT:
            self.dump()
            return
        if self._recursive_call:
            self._recursive_count += 1
        if self._recursive_count > 2:
            self._recursive_count = 0
            self._recursive_call = False
            self.dump()

    def dump(self) -> None:
        """Write all recorded points as one trace and forget them."""
        self._depth = 0
        trace = "->".join(str(point) for point in self._points)
        if self._points:
            trace += ";"
        self.output.write("\r\n" + trace + "\n")
        self._points.clear()

    @contextmanager
    def trace(self, function_name: str, state_name: str, event: Event) -> Iterator[None]:
        """Record a point on entry and check the tail on leaving the block."""
        self.add_point(function_name, state_name, event)
        try:
            yield
        finally:
            self.check_tail(function_name)
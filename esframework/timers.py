"""A bank of sixteen software countdown timers driven by a periodic tick."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Optional

from .events import Event, EventType

NUM_TIMERS = 16
TIMER_FREQUENCY_HZ = 1000

PostFunction = Callable[[Event], Any]


class TimerError(Exception):
    """Raised when a timer operation is not allowed."""


class TimerBank:
    """Sixteen countdown timers, each posting its events to one service.

    ``post_functions`` gives, for each timer number, the function that
    receives that timer's events, or None for a timer that is unused.
    Missing trailing entries are unused timers.  Times are counted in
    ticks; call :meth:`tick` once per tick (one millisecond on the robot).
    """

    def __init__(self, post_functions: Sequence[Optional[PostFunction]]) -> None:
        posts = list(post_functions)
        if len(posts) > NUM_TIMERS:
            raise ValueError(
                f"at most {NUM_TIMERS} timers are available, got {len(posts)}"
            )
        posts.extend([None] * (NUM_TIMERS - len(posts)))
        self._posts: list[Optional[PostFunction]] = posts
        self._times = [0] * NUM_TIMERS
        self._active: set[int] = set()
        self._free_running = 0

    def _check_number(self, num: int) -> None:
        if not 0 <= num < NUM_TIMERS:
            raise TimerError(f"no timer number {num}")

    def _check_used(self, num: int) -> None:
        self._check_number(num)
        if self._posts[num] is None:
            raise TimerError(f"timer {num} has no service attached")

    def _post(self, num: int, event_type: EventType) -> None:
        post = self._posts[num]
        if post is not None:
            post(Event(event_type, num))

    def set_timer(self, num: int, new_time: int) -> None:
        """Load a time into a timer without starting it."""
        self._check_used(num)
        if new_time == 0:
            raise TimerError("a timer cannot be set to zero ticks")
        self._times[num] = new_time

    def start_timer(self, num: int) -> None:
        """Start a timer from the time it holds and post ES_TIMERACTIVE."""
        self._check_number(num)
        if self._times[num] == 0:
            raise TimerError(f"timer {num} holds no time to count")
        self._active.add(num)
        self._post(num, EventType.ES_TIMERACTIVE)

    def stop_timer(self, num: int) -> None:
        """Stop an active timer and post ES_TIMERSTOPPED."""
        self._check_used(num)
        if num not in self._active:
            raise TimerError(f"timer {num} is not active")
        self._active.discard(num)
        self._post(num, EventType.ES_TIMERSTOPPED)

    def init_timer(self, num: int, new_time: int) -> None:
        """Load a time into a timer, start it and post ES_TIMERACTIVE."""
        self._check_used(num)
        if new_time == 0:
            raise TimerError("a timer cannot be set to zero ticks")
        self._times[num] = new_time
        self._active.add(num)
        self._post(num, EventType.ES_TIMERACTIVE)

    def is_active(self, num: int) -> bool:
        """Return True if the timer is counting."""
        self._check_number(num)
        return num in self._active

    def tick(self) -> None:
        """Advance time by one tick, posting ES_TIMEOUT for expired timers."""
        self._free_running = (self._free_running + 1) & 0xFFFFFFFF
        for num in sorted(self._active):
            self._times[num] -= 1
            if self._times[num] == 0:
                self._post(num, EventType.ES_TIMEOUT)
                self._active.discard(num)

    def get_time(self) -> int:
        """Return the number of ticks counted so far."""
        return self._free_running
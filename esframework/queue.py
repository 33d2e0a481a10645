"""Bounded first-in first-out queue of events."""

from __future__ import annotations

from collections import deque

from .events import Event, EventType


class QueueFullError(Exception):
    """Raised when an event is put into a queue that is already full."""


class EventQueue:
    """A FIFO queue holding at most ``capacity`` events."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self.capacity = capacity
        self._items: deque[Event] = deque()

    def put(self, event: Event) -> None:
        """Append an event, raising QueueFullError if there is no room."""
        if len(self._items) >= self.capacity:
            raise QueueFullError(f"queue is full ({self.capacity} events)")
        self._items.append(event)

    def get(self) -> Event:
        """Remove and return the oldest event.

        An empty queue yields an ES_NO_EVENT event with parameter 0.
        """
        if not self._items:
            return Event(EventType.ES_NO_EVENT, 0)
        return self._items.popleft()

    def is_empty(self) -> bool:
        """Return True if the queue holds no events."""
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"EventQueue(capacity={self.capacity}, size={len(self._items)})"
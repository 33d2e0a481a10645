"""The core of the events and services framework.

A framework holds an ordered list of services, each with its own event
queue.  Running it repeatedly hands queued events to the services and,
whenever every queue is empty, polls the event checkers for new events.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .events import Event, EventType
from .queue import EventQueue
from .timers import TimerBank

MAX_NUM_SERVICES = 8

CheckFunction = Callable[[], bool]
PostFunction = Callable[[Event], Any]


class FrameworkError(Exception):
    """Raised when a service is missing, fails to start or reports an error."""


class Service(Protocol):
    """What the framework needs from a service."""

    def init(self, framework: "Framework", priority: int) -> bool:
        """Prepare the service; return True on success."""
        ...

    def run(self, event: Event) -> Event:
        """Handle one event; an ES_ERROR result stops the framework."""
        ...


@dataclass(frozen=True)
class ServiceSpec:
    """A service together with the number of events its queue can hold."""

    service: Optional[Service]
    queue_size: int


def check_user_events(checkers: Iterable[CheckFunction]) -> bool:
    """Call the checkers in order until one reports an event.

    Returns True if some checker found an event, False otherwise.
    """
    return any(checker() for checker in checkers)


def post_to_list(post_functions: Iterable[PostFunction], event: Event) -> None:
    """Post an event to every function in a distribution list, in order.

    A failing post raises, and the functions after it are not called.
    """
    for post in post_functions:
        post(event)


class Framework:
    """Services with prioritised queues, event checkers and a timer bank.

    Services are given their priority by position: index 0 is the lowest.
    Each pass over the queues visits the services from index 0 upwards,
    handing one event to each service whose queue is not empty.
    """

    def __init__(
        self,
        services: Sequence[ServiceSpec],
        checkers: Iterable[CheckFunction] = (),
        timers: Optional[TimerBank] = None,
    ) -> None:
        specs = list(services)
        if not specs:
            raise ValueError("a framework needs at least one service")
        if len(specs) > MAX_NUM_SERVICES:
            raise ValueError(
                f"at most {MAX_NUM_SERVICES} services are supported, got {len(specs)}"
            )
        self.services = specs
        self.checkers: list[CheckFunction] = list(checkers)
        self.timers = timers
        # Queues have no room until their service is initialised.
        self._queues = [EventQueue(0) for _ in specs]
        self._ready: set[int] = set()

    @property
    def ready(self) -> frozenset[int]:
        """The numbers of the services whose queues hold events."""
        return frozenset(self._ready)

    def queue(self, which: int) -> EventQueue:
        """Return the event queue of a service."""
        self._check_service(which)
        return self._queues[which]

    def _check_service(self, which: int) -> None:
        if not 0 <= which < len(self._queues):
            raise FrameworkError(f"no service number {which}")

    def initialize(self) -> None:
        """Create each service's queue and initialise the services in order."""
        for priority, spec in enumerate(self.services):
            if spec.service is None:
                raise FrameworkError(f"service {priority} is missing")
            self._queues[priority] = EventQueue(spec.queue_size)
            self._ready.discard(priority)
            if spec.service.init(self, priority) is not True:
                raise FrameworkError(f"service {priority} failed to initialise")

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Dispatch events and poll the checkers.

        Each cycle empties every queue and then polls the checkers once.
        With ``max_cycles`` of None this runs until a service reports
        ES_ERROR, which raises FrameworkError.
        """
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            while self._ready:
                for which, spec in enumerate(self.services):
                    if which not in self._ready:
                        continue
                    queue = self._queues[which]
                    event = queue.get()
                    if queue.is_empty():
                        self._ready.discard(which)
                    assert spec.service is not None
                    result = spec.service.run(event)
                    if result.type == EventType.ES_ERROR:
                        raise FrameworkError(
                            f"service {which} reported an error handling "
                            f"{event.type.name}"
                        )
            self.check_user_events()
            cycles += 1

    def post_all(self, event: Event) -> None:
        """Post an event to every service's queue, lowest priority first.

        A full queue raises QueueFullError; the queues before it keep the event.
        """
        for which, queue in enumerate(self._queues):
            queue.put(event)
            self._ready.add(which)

    def post_to_service(self, which: int, event: Event) -> None:
        """Post an event to one service's queue."""
        self._check_service(which)
        self._queues[which].put(event)
        self._ready.add(which)

    def check_user_events(self) -> bool:
        """Poll this framework's checkers; True if one found an event."""
        return check_user_events(self.checkers)
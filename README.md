# esframework

A small events-and-services framework for writing event-driven, hierarchical
state machines, together with the pieces of a robot controller built on it.

## What is in the package

- `esframework.events`: the `EventType` enumeration (framework events such as
  `ES_INIT`, `ES_ENTRY`, `ES_EXIT`, `ES_TIMEOUT`, followed by the sensor events
  such as `FRONT_WIRE_HIGH`, `BEACON_FOUND` and `RH_TAPE_ON`), the frozen
  `Event` record (`type` and an integer `param`, default 0) and
  `event_name()`, which raises `ValueError` for an unknown number.
- `esframework.queue`: `EventQueue(capacity)`, a bounded FIFO. `put()` raises
  `QueueFullError` when the queue is full; `get()` on an empty queue returns an
  `ES_NO_EVENT` event.
- `esframework.timers`: `TimerBank`, sixteen countdown timers. Each timer posts
  its events (`ES_TIMERACTIVE`, `ES_TIMERSTOPPED`, `ES_TIMEOUT`, with the
  timer number as parameter) through the function given for it, or is unused
  if given `None`. Operations that are not allowed raise `TimerError`. Time
  advances only when you call `tick()`; `get_time()` returns the ticks counted.
- `esframework.tattletale`: `TattleTale`, which records a `TattlePoint` per
  traced call and writes one trace line (`machine(state[EVENT,PARAM])->...;`)
  to its output once the outermost call has finished. `trace()` is a context
  manager that records on entry and checks the tail on exit.
- `esframework.framework`: `Framework`, which owns a list of `ServiceSpec`
  entries (a service and its queue size), gives each service a queue on
  `initialize()`, dispatches queued events by priority in `run()` and polls the
  event checkers whenever every queue is empty. A service is any object with
  `init(framework, priority)` and `run(event)`. Missing services, failed
  initialisation and an `ES_ERROR` result raise `FrameworkError`. The module
  also has `check_user_events()` and `post_to_list()`.
- `esframework.event_checkers`: debounced checkers (`TrackWireChecker`,
  `BinarySensorChecker`, `BeaconChecker`) that post an event once a changed
  reading has held for long enough, and `make_default_checkers()`, which
  builds the robot's checkers from a `Sensors` record of reading functions.
- `esframework.keyboard`: `KeyboardInput`, a service that collects
  `ES_KEYINPUT` characters into commands such as `7;` or `20->1F;` and posts
  the resulting event to a target function; `parse_command()` and
  `format_event_list()` are available on their own.
- `esframework.bottom_tape`: `BottomTapeSubHSM`, a sub-machine that takes its
  initial transition into `BackUpFL` and passes every other event up.
- `esframework.deposit_ball`: `DepositBallSubHSM`, which drives back and forth
  until a side tape sensor finds the hole, centres over it, releases the ball,
  jiggles and ends in `Done`, starting timers on a `TimerBank` as it goes. It
  commands any object that provides the `Drive` methods.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

A queue:

```python
from esframework.events import Event, EventType
from esframework.queue import EventQueue

queue = EventQueue(3)
queue.put(Event(EventType.ES_INIT))
queue.put(Event(EventType.BEACON_FOUND, 1))

event = queue.get()
print(event.type.name)   # ES_INIT
print(len(queue))        # 1
```

Timers post their events through the functions they were given:

```python
from esframework.timers import TimerBank

received = []
timers = TimerBank([received.append, received.append])
timers.init_timer(0, 3)
for _ in range(3):
    timers.tick()
# received now holds an ES_TIMERACTIVE event followed by an ES_TIMEOUT event
```

A framework with one service:

```python
from esframework.events import Event, EventType
from esframework.framework import Framework, ServiceSpec

seen = []

class Echo:
    def init(self, framework, priority):
        framework.post_to_service(priority, Event(EventType.ES_INIT))
        return True

    def run(self, event):
        seen.append(event.type.name)
        return Event(EventType.ES_NO_EVENT)

framework = Framework([ServiceSpec(Echo(), 3)])
framework.initialize()
framework.run(max_cycles=1)
print(seen)   # ['ES_INIT']
```

## What the package does not do

- It talks to no hardware. Sensor readings, motors and the ball servo are
  functions and objects you supply (`Sensors`, `Drive`), and nothing calls
  `TimerBank.tick()` for you.
- It has no command-line program. `KeyboardInput` reads nothing from a
  terminal; characters reach it only as `ES_KEYINPUT` events posted to it.
- It has no top-level robot state machine that ties the sub-machines
  together; `BottomTapeSubHSM` does nothing beyond its initial transition.
- `Framework.run()` is a plain synchronous loop; it runs until a service
  reports `ES_ERROR` unless given `max_cycles`.
"""Events-and-services framework: event queues, software timers, debounced
event checkers, call tracing and robot sub-state machines."""

__version__ = "0.1.0"

__all__ = [
    "bottom_tape",
    "deposit_ball",
    "event_checkers",
    "events",
    "framework",
    "keyboard",
    "queue",
    "tattletale",
    "timers",
]
"""Sub-state machine that lines the robot up over a hole and drops the ball.

The robot drives back and forth along the wall until a side tape sensor
sees the hole, creeps past it, backs up a little to centre over it,
releases the ball, jiggles to shake it loose and then finishes.

Like every machine in the hierarchy, each call runs the current state's
drive action before looking at the event.  The exit and entry calls made
during a transition are therefore also driving calls.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, NamedTuple, Optional, Protocol

from .events import Event, EventType
from .tattletale import TattleTale
from .timers import TimerBank

TOP_LEVEL_TIMER = 0
TOP_TRANSITION_TIMER = 1

FAST_SPEED = 700
SLOW_SPEED = 300

_TRACE_NAME = "DepositBallSubHSM.run"


class Drive(Protocol):
    """The motors and the ball servo the machine commands."""

    def move_forward(self, speed: int) -> Any:
        """Drive forward at the given speed."""
        ...

    def move_backward(self, speed: int) -> Any:
        """Drive backward at the given speed."""
        ...

    def stop_motors(self) -> Any:
        """Stop both drive motors."""
        ...

    def release_ball(self) -> Any:
        """Move the servo to drop the ball."""
        ...

    def reset_ball(self) -> Any:
        """Return the servo to its holding position."""
        ...


class DepositBallState(Enum):
    """States of the deposit-ball sub-machine; the value is the display name."""

    DRIVE_FWD = "DriveFWD"
    DRIVE_BWD = "DriveBWD"
    DRIVE_FWD_SLOW = "DriveFWDSlow"
    DRIVE_BWD_SLOW = "DriveBWDSlow"
    CORRECT_FWD = "CorrectFWD"
    CORRECT_BWD = "CorrectBWD"
    MOVE_SERVO = "MoveServo"
    JIGGLE_BWD = "JiggleBWD"
    JIGGLE_FWD = "JiggleFWD"
    DONE = "Done"


class _Transition(NamedTuple):
    next_state: DepositBallState
    timer: int
    time: int


_S = DepositBallState
_E = EventType

_ACTIONS: dict[DepositBallState, Callable[[Drive], None]] = {
    _S.DRIVE_FWD: lambda drive: drive.move_forward(FAST_SPEED),
    _S.DRIVE_BWD: lambda drive: drive.move_backward(FAST_SPEED),
    _S.DRIVE_FWD_SLOW: lambda drive: drive.move_forward(SLOW_SPEED),
    _S.DRIVE_BWD_SLOW: lambda drive: drive.move_backward(SLOW_SPEED),
    _S.CORRECT_BWD: lambda drive: drive.move_backward(SLOW_SPEED),
    _S.CORRECT_FWD: lambda drive: drive.move_forward(SLOW_SPEED),
    _S.MOVE_SERVO: lambda drive: (drive.stop_motors(), drive.release_ball()) and None,
    _S.JIGGLE_BWD: lambda drive: (drive.move_backward(SLOW_SPEED), drive.reset_ball())
    and None,
    _S.JIGGLE_FWD: lambda drive: drive.move_forward(SLOW_SPEED),
}

_TRANSITIONS: dict[DepositBallState, dict[EventType, _Transition]] = {
    _S.DRIVE_FWD: {
        _E.RH_TAPE_ON: _Transition(_S.DRIVE_FWD_SLOW, TOP_LEVEL_TIMER, 1500),
        _E.ES_TIMEOUT: _Transition(_S.DRIVE_BWD, TOP_LEVEL_TIMER, 5000),
        _E.FL_TAPE_ON: _Transition(_S.DRIVE_BWD, TOP_LEVEL_TIMER, 5000),
        _E.FR_TAPE_ON: _Transition(_S.DRIVE_BWD, TOP_LEVEL_TIMER, 5000),
    },
    _S.DRIVE_BWD: {
        _E.LH_TAPE_ON: _Transition(_S.DRIVE_BWD_SLOW, TOP_LEVEL_TIMER, 1500),
        _E.ES_TIMEOUT: _Transition(_S.DRIVE_FWD, TOP_LEVEL_TIMER, 5000),
        _E.RL_TAPE_ON: _Transition(_S.DRIVE_FWD, TOP_LEVEL_TIMER, 5000),
        _E.RR_TAPE_ON: _Transition(_S.DRIVE_FWD, TOP_LEVEL_TIMER, 5000),
    },
    _S.DRIVE_FWD_SLOW: {
        _E.RH_TAPE_OFF: _Transition(_S.CORRECT_BWD, TOP_LEVEL_TIMER, 200),
        _E.ES_TIMEOUT: _Transition(_S.DRIVE_BWD, TOP_LEVEL_TIMER, 5000),
    },
    _S.DRIVE_BWD_SLOW: {
        _E.LH_TAPE_OFF: _Transition(_S.CORRECT_FWD, TOP_LEVEL_TIMER, 200),
        _E.ES_TIMEOUT: _Transition(_S.DRIVE_FWD, TOP_LEVEL_TIMER, 5000),
    },
    _S.CORRECT_BWD: {
        _E.ES_TIMEOUT: _Transition(_S.MOVE_SERVO, TOP_LEVEL_TIMER, 1000),
    },
    _S.CORRECT_FWD: {
        _E.ES_TIMEOUT: _Transition(_S.MOVE_SERVO, TOP_LEVEL_TIMER, 1000),
    },
    _S.MOVE_SERVO: {
        _E.ES_TIMEOUT: _Transition(_S.JIGGLE_BWD, TOP_LEVEL_TIMER, 500),
    },
    _S.JIGGLE_BWD: {
        _E.ES_TIMEOUT: _Transition(_S.JIGGLE_FWD, TOP_LEVEL_TIMER, 500),
    },
    _S.JIGGLE_FWD: {
        _E.ES_TIMEOUT: _Transition(_S.DONE, TOP_TRANSITION_TIMER, 5),
    },
}


class DepositBallSubHSM:
    """Drives to the hole, drops the ball and signals completion.

    Every event is returned unchanged so the machine above sees it too.
    Leaving JiggleFWD starts the transition timer, whose timeout tells the
    machine above that the deposit is finished.
    """

    def __init__(
        self,
        drive: Drive,
        timers: TimerBank,
        tattle: Optional[TattleTale] = None,
    ) -> None:
        self.drive = drive
        self.timers = timers
        self.tattle = tattle
        self.state = DepositBallState.DRIVE_FWD

    def init(self) -> bool:
        """Reset to DriveFWD and run ES_INIT.

        Returns True only if ES_INIT was consumed; this machine passes every
        event up, so the result is False.
        """
        self.state = DepositBallState.DRIVE_FWD
        return self.run(Event(EventType.ES_INIT, 0)).type == EventType.ES_NO_EVENT

    def run(self, event: Event) -> Event:
        """Handle an event and return it to the machine above."""
        if self.tattle is None:
            return self._run(event)
        with self.tattle.trace(_TRACE_NAME, self.state.value, event):
            return self._run(event)

    def _run(self, event: Event) -> Event:
        action = _ACTIONS.get(self.state)
        if action is not None:
            action(self.drive)
        transition = _TRANSITIONS.get(self.state, {}).get(event.type)
        if transition is not None:
            self.timers.init_timer(transition.timer, transition.time)
            self.run(Event(EventType.ES_EXIT, 0))
            self.state = transition.next_state
            self.run(Event(EventType.ES_ENTRY, 0))
        return event
import io

import pytest

from esframework.deposit_ball import (
    TOP_LEVEL_TIMER,
    TOP_TRANSITION_TIMER,
    DepositBallState,
    DepositBallSubHSM,
)
from esframework.events import Event, EventType
from esframework.tattletale import TattleTale
from esframework.timers import TimerBank, TimerError


class FakeDrive:
    def __init__(self):
        self.calls = []

    def move_forward(self, speed):
        self.calls.append(("forward", speed))

    def move_backward(self, speed):
        self.calls.append(("backward", speed))

    def stop_motors(self):
        self.calls.append(("stop",))

    def release_ball(self):
        self.calls.append(("release",))

    def reset_ball(self):
        self.calls.append(("reset",))


@pytest.fixture
def posted():
    return []


@pytest.fixture
def machine(posted):
    timers = TimerBank([posted.append, posted.append])
    return DepositBallSubHSM(FakeDrive(), timers)


def ev(event_type, param=0):
    return Event(event_type, param)


def test_init_keeps_drive_forward_and_reports_not_consumed(machine):
    assert machine.init() is False
    assert machine.state is DepositBallState.DRIVE_FWD
    assert machine.drive.calls == [("forward", 700)]


def test_unhandled_event_is_returned_and_state_kept(machine):
    event = ev(EventType.BEACON_FOUND, 3)
    assert machine.run(event) == event
    assert machine.state is DepositBallState.DRIVE_FWD
    assert machine.drive.calls == [("forward", 700)]


def test_transition_runs_exit_and_entry_actions(machine, posted):
    event = ev(EventType.RH_TAPE_ON)
    assert machine.run(event) == event
    assert machine.state is DepositBallState.DRIVE_FWD_SLOW
    assert machine.drive.calls == [("forward", 700), ("forward", 700), ("forward", 300)]
    assert posted == [ev(EventType.ES_TIMERACTIVE, TOP_LEVEL_TIMER)]
    assert machine.timers.is_active(TOP_LEVEL_TIMER)


def test_slow_timer_expires_after_1500_ticks(machine, posted):
    machine.run(ev(EventType.RH_TAPE_ON))
    for _ in range(1499):
        machine.timers.tick()
    assert machine.timers.is_active(TOP_LEVEL_TIMER)
    machine.timers.tick()
    assert posted[-1] == ev(EventType.ES_TIMEOUT, TOP_LEVEL_TIMER)


@pytest.mark.parametrize(
    "start, event_type, expected",
    [
        (DepositBallState.DRIVE_FWD, EventType.ES_TIMEOUT, DepositBallState.DRIVE_BWD),
        (DepositBallState.DRIVE_FWD, EventType.FL_TAPE_ON, DepositBallState.DRIVE_BWD),
        (DepositBallState.DRIVE_FWD, EventType.FR_TAPE_ON, DepositBallState.DRIVE_BWD),
        (DepositBallState.DRIVE_BWD, EventType.LH_TAPE_ON, DepositBallState.DRIVE_BWD_SLOW),
        (DepositBallState.DRIVE_BWD, EventType.ES_TIMEOUT, DepositBallState.DRIVE_FWD),
        (DepositBallState.DRIVE_BWD, EventType.RL_TAPE_ON, DepositBallState.DRIVE_FWD),
        (DepositBallState.DRIVE_BWD, EventType.RR_TAPE_ON, DepositBallState.DRIVE_FWD),
        (DepositBallState.DRIVE_FWD_SLOW, EventType.RH_TAPE_OFF, DepositBallState.CORRECT_BWD),
        (DepositBallState.DRIVE_FWD_SLOW, EventType.ES_TIMEOUT, DepositBallState.DRIVE_BWD),
        (DepositBallState.DRIVE_BWD_SLOW, EventType.LH_TAPE_OFF, DepositBallState.CORRECT_FWD),
        (DepositBallState.DRIVE_BWD_SLOW, EventType.ES_TIMEOUT, DepositBallState.DRIVE_FWD),
        (DepositBallState.CORRECT_BWD, EventType.ES_TIMEOUT, DepositBallState.MOVE_SERVO),
        (DepositBallState.CORRECT_FWD, EventType.ES_TIMEOUT, DepositBallState.MOVE_SERVO),
        (DepositBallState.MOVE_SERVO, EventType.ES_TIMEOUT, DepositBallState.JIGGLE_BWD),
        (DepositBallState.JIGGLE_BWD, EventType.ES_TIMEOUT, DepositBallState.JIGGLE_FWD),
        (DepositBallState.JIGGLE_FWD, EventType.ES_TIMEOUT, DepositBallState.DONE),
    ],
)
def test_transition_table(machine, start, event_type, expected):
    machine.state = start
    event = ev(event_type)
    assert machine.run(event) == event
    assert machine.state is expected


def test_drive_forward_ignores_rear_tape(machine):
    machine.run(ev(EventType.RL_TAPE_ON))
    assert machine.state is DepositBallState.DRIVE_FWD
    assert not machine.timers.is_active(TOP_LEVEL_TIMER)


def test_done_state_does_nothing(machine):
    machine.state = DepositBallState.DONE
    machine.run(ev(EventType.ES_TIMEOUT))
    assert machine.state is DepositBallState.DONE
    assert machine.drive.calls == []


def test_leaving_jiggle_starts_transition_timer(machine, posted):
    machine.state = DepositBallState.JIGGLE_FWD
    machine.run(ev(EventType.ES_TIMEOUT))
    assert posted == [ev(EventType.ES_TIMERACTIVE, TOP_TRANSITION_TIMER)]
    for _ in range(5):
        machine.timers.tick()
    assert posted[-1] == ev(EventType.ES_TIMEOUT, TOP_TRANSITION_TIMER)


def test_full_deposit_releases_ball_once(machine):
    for event_type in [
        EventType.RH_TAPE_ON,
        EventType.RH_TAPE_OFF,
        EventType.ES_TIMEOUT,
        EventType.ES_TIMEOUT,
        EventType.ES_TIMEOUT,
        EventType.ES_TIMEOUT,
    ]:
        machine.run(ev(event_type))
    assert machine.state is DepositBallState.DONE
    calls = machine.drive.calls
    assert calls.count(("release",)) >= 1
    assert ("reset",) in calls
    assert calls.index(("release",)) < calls.index(("reset",))
    assert ("stop",) in calls


def test_missing_timer_service_raises(posted):
    machine = DepositBallSubHSM(FakeDrive(), TimerBank([]))
    with pytest.raises(TimerError):
        machine.run(ev(EventType.RH_TAPE_ON))


def test_tattle_trace_written(posted):
    output = io.StringIO()
    machine = DepositBallSubHSM(
        FakeDrive(), TimerBank([posted.append, posted.append]), TattleTale(output)
    )
    machine.run(ev(EventType.BEACON_FOUND))
    assert "DepositBallSubHSM.run(DriveFWD[BEACON_FOUND,0]);" in output.getvalue()
    assert machine.tattle.points == ()
"""Sub-state machine for recovering from the bottom tape sensors."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .events import Event, EventType
from .tattletale import TattleTale

_TRACE_NAME = "BottomTapeSubHSM.run"


class BottomTapeState(Enum):
    """States of the bottom-tape sub-machine; the value is the display name."""

    INIT = "InitPSubState"
    BACK_UP_FL = "BackUpFL"
    BACK_UP_FR = "BackUpFR"
    BACK_UP_FB = "BackUpFB"
    DRIVE_FWD_BL = "DriveFWDBL"
    DRIVE_FWD_BR = "DriveFWDBR"
    DRIVE_FWD_BB = "DriveFWDBB"
    TANK_TURN_FL = "TankTurnFL"
    TANK_TURN_FR = "TankTurnFR"
    TANK_TURN_FB = "TankTurnFB"
    TANK_TURN_BL = "TankTurnBL"
    TANK_TURN_BR = "TankTurnBR"
    TANK_TURN_BB = "TankTurnBB"


class BottomTapeSubHSM:
    """A sub-machine that enters BackUpFL on initialisation.

    Events it does not handle are returned unchanged to the machine above.
    """

    def __init__(self, tattle: Optional[TattleTale] = None) -> None:
        self.tattle = tattle
        self.state = BottomTapeState.INIT

    def init(self) -> bool:
        """Reset to the initial pseudo-state and take the initial transition."""
        self.state = BottomTapeState.INIT
        return self.run(Event(EventType.ES_INIT, 0)).type == EventType.ES_NO_EVENT

    def run(self, event: Event) -> Event:
        """Handle an event, returning ES_NO_EVENT if it was consumed."""
        if self.tattle is None:
            return self._run(event)
        with self.tattle.trace(_TRACE_NAME, self.state.value, event):
            return self._run(event)

    def _run(self, event: Event) -> Event:
        next_state: Optional[BottomTapeState] = None
        if self.state is BottomTapeState.INIT and event.type == EventType.ES_INIT:
            next_state = BottomTapeState.BACK_UP_FL
            event = Event(EventType.ES_NO_EVENT, event.param)

        if next_state is not None:
            self.run(Event(EventType.ES_EXIT, 0))
            self.state = next_state
            self.run(Event(EventType.ES_ENTRY, 0))
        return event
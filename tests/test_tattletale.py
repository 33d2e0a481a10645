import io

import pytest

from esframework.events import Event, EventType
from esframework.tattletale import TATTLE_POINTS, TattlePoint, TattleTale


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def tattle(out):
    return TattleTale(out)


def test_single_call_dumps_trace(tattle, out):
    tattle.add_point("RunTop", "Idle", Event(EventType.ES_INIT, 0))
    tattle.check_tail("RunTop")
    assert out.getvalue() == "\r\nRunTop(Idle[ES_INIT,0]);\n"
    assert tattle.points == ()


def test_param_written_in_hex(tattle, out):
    tattle.add_point("RunTop", "Idle", Event(EventType.ES_TIMEOUT, 255))
    tattle.check_tail("RunTop")
    assert out.getvalue() == "\r\nRunTop(Idle[ES_TIMEOUT,FF]);\n"
    assert tattle.points == ()


def test_nested_machine_dumps_when_top_returns(tattle, out):
    tattle.add_point("RunTop", "Search", Event(EventType.BEACON_FOUND, 0))
    tattle.add_point("RunSub", "Drive", Event(EventType.BEACON_FOUND, 0))
    tattle.check_tail("RunSub")
    assert out.getvalue() == ""
    tattle.check_tail("RunTop")
    text = out.getvalue()
    assert text.startswith("\r\n")
    assert text.endswith(";\n")
    assert text.count("->") == 1
    assert tattle.depth == 0


def test_transition_waits_for_exit_and_entry(tattle, out):
    tattle.add_point("RunTop", "A", Event(EventType.ES_INIT, 0))
    tattle.add_point("RunTop", "A", Event(EventType.ES_EXIT, 0))
    tattle.check_tail("RunTop")
    assert out.getvalue() == ""
    tattle.add_point("RunTop", "B", Event(EventType.ES_ENTRY, 0))
    tattle.check_tail("RunTop")
    assert out.getvalue() == ""
    tattle.check_tail("RunTop")
    assert out.getvalue().count("->") == 2
    assert tattle.points == ()


def test_points_record_depth(tattle):
    tattle.add_point("RunTop", "A", Event(EventType.ES_INIT, 0))
    tattle.add_point("RunSub", "S", Event(EventType.ES_INIT, 0))
    assert [p.depth for p in tattle.points] == [0, 1]
    assert tattle.points[1] == TattlePoint("RunSub", "S", 1, Event(EventType.ES_INIT, 0))


def test_point_limit(tattle, out):
    tattle.add_point("RunTop", "A", Event(EventType.ES_INIT, 0))
    for _ in range(TATTLE_POINTS + 5):
        tattle.add_point("RunSub", "S", Event(EventType.ES_TIMEOUT, 0))
    assert len(tattle.points) == TATTLE_POINTS
    for _ in range(TATTLE_POINTS + 5):
        tattle.check_tail("RunSub")
    tattle.check_tail("RunTop")
    assert out.getvalue().count("->") == TATTLE_POINTS - 1


def test_trace_context_manager(tattle, out):
    with tattle.trace("RunTop", "Idle", Event(EventType.ES_INIT, 0)):
        assert tattle.depth == 1
        assert len(tattle.points) == 1
    assert out.getvalue() == "\r\nRunTop(Idle[ES_INIT,0]);\n"
    assert tattle.depth == 0


def test_dump_resets_points(tattle, out):
    tattle.add_point("RunTop", "A", Event(EventType.ES_INIT, 0))
    tattle.dump()
    assert tattle.points == ()
    assert "RunTop(A[ES_INIT,0]);" in out.getvalue()


def test_point_str():
    point = TattlePoint("RunSub", "Move", 2, Event(EventType.FL_TAPE_ON, 10))
    assert str(point) == "RunSub(Move[FL_TAPE_ON,A])"
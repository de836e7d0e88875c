import time as _time

import pytest

from arcdps_ext.combat_event_handler import (
    Agent,
    CombatEvent,
    CombatEventHandler,
    StateChange,
)


class Recorder(CombatEventHandler):
    def __init__(self):
        self.calls = []
        self.logs = []
        super().__init__()

    def log(self, text):
        self.logs.append(text)

    def agent_added(self, *args):
        self.calls.append(("agent_added", args))

    def agent_removed(self, *args):
        self.calls.append(("agent_removed", args))

    def target_change(self, id):
        self.calls.append(("target_change", (id,)))

    def enter_combat(self, *args):
        self.calls.append(("enter_combat", args))

    def strike(self, *args):
        self.calls.append(("strike", args))

    def activation(self, *args):
        self.calls.append(("activation", args))

    def buff_remove(self, *args):
        self.calls.append(("buff_remove", args))

    def buff_damage(self, *args):
        self.calls.append(("buff_damage", args))

    def buff_apply(self, *args):
        self.calls.append(("buff_apply", args))

    def buff_initial(self, *args):
        self.calls.append(("buff_initial", args))

    def log_npc_update(self, *args):
        self.calls.append(("log_npc_update", args))


@pytest.fixture
def handler():
    h = Recorder()
    yield h
    h.shutdown()


def test_strike_delivered_directly_for_id_zero(handler):
    ev = CombatEvent(time=1234)
    src, dst = Agent(name="a", id=7), Agent(name="b", id=8)
    handler.event(ev, src, dst, "Hit", 0)
    assert handler.calls == [("strike", (1234, ev, src, dst, "Hit", 0))]
    assert handler.last_event_time == 1234


def test_enter_combat_subgroup_from_dst_agent(handler):
    ev = CombatEvent(time=5, src_agent=42, dst_agent=3, is_statechange=StateChange.ENTER_COMBAT)
    src = Agent(name="x")
    handler.event(ev, src, None, None, 0)
    assert handler.calls == [("enter_combat", (5, 42, 3, src))]


def test_agent_added_strips_leading_colon(handler):
    src = Agent(name="Char Name", id=10, prof=1, team=9)
    dst = Agent(name=":Account.1234", id=20, prof=4, elite=5, is_self=1, team=2)
    handler.event(None, src, dst, None, 0)
    assert handler.calls == [
        ("agent_added", ("Account.1234", "Char Name", 10, 20, 4, 5, True, 9, 2))
    ]


def test_agent_removed_when_profession_zero(handler):
    src = Agent(name="Char Name", id=10, prof=0)
    dst = Agent(name="Plain", id=20, is_self=0)
    handler.event(None, src, dst, None, 0)
    assert handler.calls == [("agent_removed", ("Plain", "Char Name", 10, False))]


def test_tracking_ignored_without_names(handler):
    handler.event(None, Agent(name="", prof=1), Agent(name="acc"), None, 0)
    handler.event(None, Agent(name="c", prof=1), Agent(name=None), None, 0)
    assert handler.calls == []
    assert handler.logs == ["pId: 0", "pId: 0"]


def test_target_change_when_elite_is_one(handler):
    handler.event(None, Agent(elite=1, id=77), None, None, 0)
    assert handler.calls == [("target_change", (77,))]


def test_buff_initial_and_fallback_to_buff_apply(handler):
    src, dst = Agent(name="s"), Agent(name="d")
    initial = CombatEvent(time=1, buff=18, pad=55, is_statechange=StateChange.BUFF_INITIAL)
    other = CombatEvent(time=2, buff=1, pad=66, is_statechange=StateChange.BUFF_INITIAL)
    handler.event(initial, src, dst, "Might", 0)
    handler.event(other, src, dst, "Might", 0)
    assert handler.calls == [
        ("buff_initial", (1, initial, src, dst, "Might", 0, 55)),
        ("buff_apply", (2, other, src, dst, "Might", 0, 66)),
    ]


def test_buff_remove_damage_and_activation(handler):
    src, dst = Agent(name="s"), Agent(name="d")
    remove = CombatEvent(time=1, is_buffremove=1, pad=9)
    damage = CombatEvent(time=2, buff=1, buff_dmg=100)
    act = CombatEvent(time=3, is_activation=1)
    for ev in (remove, damage, act):
        handler.event(ev, src, dst, "Skill", 0)
    assert [c[0] for c in handler.calls] == ["buff_remove", "buff_damage", "activation"]
    assert handler.calls[0][1][-1] == 9


def test_unhandled_state_change_calls_nothing(handler):
    ev = CombatEvent(time=8, is_statechange=StateChange.POSITION)
    handler.event(ev, Agent(), Agent(), None, 0)
    assert handler.calls == []
    assert handler.last_event_time == 8


def test_log_npc_update_values_are_unsigned(handler):
    ev = CombatEvent(time=1, value=-1, buff_dmg=3, src_agent=12, is_statechange=StateChange.LOG_NPC_UPDATE)
    handler.event(ev, Agent(), None, None, 0)
    assert handler.calls == [("log_npc_update", (1, 2**32 - 1, 3, 12))]


def test_default_hooks_log_their_names():
    h = Recorder.__mro__[1].__new__(Recorder)
    CombatEventHandler.__init__(h)
    h.logs = []
    h.calls = []
    try:
        CombatEventHandler.event_internal(h, CombatEvent(time=1, is_statechange=StateChange.STAT_RESET), Agent(), None, None, 0, 1)
        agent = Agent(name="Someone")
        CombatEventHandler.stack_reset(h, 1, 2, 300, 4, agent)
    finally:
        h.shutdown()
    assert h.logs == ["pId: 0", "StatReset", "StackReset|agentName Someone|duration 300|stackId 4"]


def test_events_delivered_in_id_order(handler):
    src, dst = Agent(name="s"), Agent(name="d")
    handler.event(CombatEvent(time=30), src, dst, None, 3)
    handler.event(CombatEvent(time=20), src, dst, None, 2)
    deadline = _time.monotonic() + 5
    while handler.events_pending() and _time.monotonic() < deadline:
        _time.sleep(0.02)
    assert not handler.events_pending()
    assert [c[1][0] for c in handler.calls] == [20, 30]


def test_context_manager_stops_worker():
    with Recorder() as h:
        h.event(CombatEvent(time=4), Agent(), Agent(), None, 0)
    assert h.calls[0][0] == "strike"
    assert not h._sequencer._thread.is_alive()
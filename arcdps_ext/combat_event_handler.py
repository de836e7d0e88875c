"""Dispatch of raw combat events to one overridable method per event kind."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum

from .event_sequencer import EventSequencer

_U8 = 0xFF
_U32 = 0xFFFFFFFF
_BUFF_INITIAL_MARKER = 18

_logger = logging.getLogger(__name__)


class StateChange(IntEnum):
    """Values of ``CombatEvent.is_statechange``."""

    NONE = 0
    ENTER_COMBAT = 1
    EXIT_COMBAT = 2
    CHANGE_UP = 3
    CHANGE_DEAD = 4
    CHANGE_DOWN = 5
    SPAWN = 6
    DESPAWN = 7
    HEALTH_UPDATE = 8
    LOG_START = 9
    LOG_END = 10
    WEAPON_SWAP = 11
    MAX_HEALTH_UPDATE = 12
    POINT_OF_VIEW = 13
    LANGUAGE = 14
    GW_BUILD = 15
    SHARD_ID = 16
    REWARD = 17
    BUFF_INITIAL = 18
    POSITION = 19
    VELOCITY = 20
    FACING = 21
    TEAM_CHANGE = 22
    ATTACK_TARGET = 23
    TARGETABLE = 24
    MAP_ID = 25
    REPL_INFO = 26
    STACK_ACTIVE = 27
    STACK_RESET = 28
    GUILD = 29
    BUFF_INFO = 30
    BUFF_FORMULA = 31
    SKILL_INFO = 32
    SKILL_TIMING = 33
    BREAKBAR_STATE = 34
    BREAKBAR_PERCENT = 35
    ERROR = 36
    TAG = 37
    BARRIER_UPDATE = 38
    STAT_RESET = 39
    EXTENSION = 40
    API_DELAYED = 41
    INSTANCE_START = 42
    TICKRATE = 43
    LAST90_BEFORE_DOWN = 44
    EFFECT = 45
    ID_TO_GUID = 46
    LOG_NPC_UPDATE = 47


@dataclass
class CombatEvent:
    """A single combat event.

    ``pad`` holds the four trailing padding bytes read as one unsigned
    32-bit number; several event kinds carry a stack id there.
    """

    time: int = 0
    src_agent: int = 0
    dst_agent: int = 0
    value: int = 0
    buff_dmg: int = 0
    overstack_value: int = 0
    skillid: int = 0
    src_instid: int = 0
    dst_instid: int = 0
    src_master_instid: int = 0
    dst_master_instid: int = 0
    iff: int = 0
    buff: int = 0
    result: int = 0
    is_activation: int = 0
    is_buffremove: int = 0
    is_ninety: int = 0
    is_fifty: int = 0
    is_moving: int = 0
    is_statechange: int = 0
    is_flanking: int = 0
    is_shields: int = 0
    is_offcycle: int = 0
    pad: int = 0


@dataclass
class Agent:
    """An agent taking part in an event."""

    name: str | None = None
    id: int = 0
    prof: int = 0
    elite: int = 0
    is_self: int = 0
    team: int = 0


class CombatEventHandler:
    """Feed every combat event to ``event``; override the hooks to react.

    Events are put in order by id and handled on a worker thread. Call
    ``shutdown`` (or leave the ``with`` block) to stop that thread.
    """

    def __init__(self) -> None:
        self.last_event_time = 0
        self._sequencer = EventSequencer(self.event_internal)

    def __enter__(self) -> CombatEventHandler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def event(self, event, src, dst, skillname, id, revision=1) -> None:
        """Hand an event to the sequencer."""
        self._sequencer.process_event(event, src, dst, skillname, id, revision)

    def events_pending(self) -> bool:
        """True while events are queued or being handled."""
        return self._sequencer.events_pending()

    def reset(self) -> None:
        """Drop queued events and restart counting ids; meant for tests."""
        self._sequencer.reset()

    def shutdown(self) -> None:
        """Stop handling events."""
        self._sequencer.shutdown()

    def event_internal(self, event, src, dst, skillname, id, revision) -> None:
        """Route one ordered event to its hook; overrides must call this."""
        self.log(f"pId: {id}")
        if event is None:
            self._tracking_event(src, dst)
            return

        self.last_event_time = event.time
        time = self.last_event_time

        if event.is_statechange:
            self._state_change(time, event, src, dst, skillname, id)
        elif event.is_activation:
            self.activation(time, event, src, dst, skillname, id)
        elif event.is_buffremove:
            self.buff_remove(time, event, src, dst, skillname, id, event.pad)
        elif event.buff:
            self._buff_event(event, src, dst, skillname, id)
        else:
            self.strike(time, event, src, dst, skillname, id)

    def _tracking_event(self, src: Agent, dst: Agent | None) -> None:
        if not src.elite:
            if not src.name or dst is None or not dst.name:
                return
            account_name = dst.name[1:] if dst.name.startswith(":") else dst.name
            if src.prof:
                self.agent_added(
                    account_name,
                    src.name,
                    src.id,
                    dst.id,
                    dst.prof,
                    dst.elite,
                    bool(dst.is_self),
                    src.team,
                    dst.team & _U8,
                )
            else:
                self.agent_removed(account_name, src.name, src.id, bool(dst.is_self))
        elif src.elite == 1:
            self.target_change(src.id)

    def _state_change(self, time, event, src, dst, skillname, id) -> None:
        match event.is_statechange:
            case StateChange.ENTER_COMBAT:
                self.enter_combat(time, event.src_agent, event.dst_agent & _U8, src)
            case StateChange.EXIT_COMBAT:
                self.exit_combat(time, event.src_agent, src)
            case StateChange.CHANGE_UP:
                self.change_up(time, event.src_agent, src)
            case StateChange.CHANGE_DEAD:
                self.change_dead(time, event.src_agent, src)
            case StateChange.CHANGE_DOWN:
                self.change_down(time, event.src_agent, src)
            case StateChange.LOG_START:
                self.log_start(time, event.value & _U32, event.buff_dmg & _U32, event.src_agent)
            case StateChange.LOG_END:
                self.log_end(time, event.value & _U32, event.buff_dmg & _U32, event.src_agent)
            case StateChange.WEAPON_SWAP:
                self.weapon_swap(time, event.src_agent, event.dst_agent, src)
            case StateChange.REWARD:
                self.reward(time, event.src_agent, event.dst_agent, event.value)
            case StateChange.BUFF_INITIAL:
                if event.buff == _BUFF_INITIAL_MARKER:
                    self.buff_initial(time, event, src, dst, skillname, id, event.pad)
                else:
                    self._buff_event(event, src, dst, skillname, id)
            case StateChange.TEAM_CHANGE:
                self.team_change(time, event.src_agent, event.dst_agent, src)
            case StateChange.STACK_ACTIVE:
                self.stack_active(time, event.src_agent, event.dst_agent, src)
            case StateChange.STACK_RESET:
                self.stack_reset(time, event.src_agent, event.value, event.pad, src)
            case StateChange.STAT_RESET:
                self.stat_reset(time)
            case StateChange.EXTENSION:
                self.extension(time, event, src, dst, skillname, id)
            case StateChange.API_DELAYED:
                self.delayed(time, event, src, dst, skillname, id)
            case StateChange.INSTANCE_START:
                self.instance_start(time, event.src_agent)
            case StateChange.TICKRATE:
                self.tickrate(time, event.src_agent)
            case StateChange.LAST90_BEFORE_DOWN:
                self.last90_before_down(time, event.src_agent, event.dst_agent)
            case StateChange.LOG_NPC_UPDATE:
                self.log_npc_update(time, event.value & _U32, event.buff_dmg & _U32, event.src_agent)

    def _buff_event(self, event, src, dst, skillname, id) -> None:
        if event.buff_dmg:
            self.buff_damage(self.last_event_time, event, src, dst, skillname, id)
        else:
            self.buff_apply(self.last_event_time, event, src, dst, skillname, id, event.pad)

    def agent_added(self, account_name, character_name, id, instance_id, profession, elite, is_self, team, subgroup) -> None:
        """An agent was added to tracking."""
        self.log("AgentAdded")

    def agent_removed(self, account_name, character_name, id, is_self) -> None:
        """An agent was removed from tracking."""
        self.log("AgentRemoved")

    def target_change(self, id) -> None:
        """The local player targeted the agent ``id``."""
        self.log("TargetChange")

    def enter_combat(self, time, agent_id, subgroup, agent) -> None:
        """An agent entered combat."""
        self.log("EnterCombat")

    def exit_combat(self, time, agent_id, agent) -> None:
        """An agent left combat."""
        self.log("ExitCombat")

    def change_up(self, time, agent_id, agent) -> None:
        """An agent is alive again after being dead or downed."""
        self.log("ChangeUp")

    def change_dead(self, time, agent_id, agent) -> None:
        """An agent died."""
        self.log("ChangeDead")

    def change_down(self, time, agent_id, agent) -> None:
        """An agent went down."""
        self.log("ChangeDown")

    def log_start(self, time, server_time, local_time, species_id) -> None:
        """A log started."""
        self.log("LogStart")

    def log_end(self, time, server_time, local_time, species_id) -> None:
        """A log ended."""
        self.log("LogEnd")

    def log_npc_update(self, time, server_time, local_time, species_id) -> None:
        """The boss of the running log changed."""
        self.log("LogNpcUpdate")

    def weapon_swap(self, time, agent_id, weapon_set, agent) -> None:
        """An agent swapped weapons."""
        self.log("WeaponSwap")

    def reward(self, time, self_id, reward_id, reward_type) -> None:
        """The local player received a reward."""
        self.log("Reward")

    def team_change(self, time, agent_id, new_team, agent) -> None:
        """An agent changed team."""
        self.log("TeamChange")

    def stack_active(self, time, agent_id, stack_id, agent) -> None:
        """A buff stack became active."""
        self.log("StackActive")

    def stack_reset(self, time, agent_id, duration, stack_id, agent) -> None:
        """A buff stack was reset to ``duration`` and made inactive."""
        self.log(f"StackReset|agentName {agent.name}|duration {duration}|stackId {stack_id}")

    def stat_reset(self, time) -> None:
        """All stats were reset."""
        self.log("StatReset")

    def extension(self, time, event, src, dst, skillname, id) -> None:
        """An event sent by another extension."""
        self.log("Extension")

    def delayed(self, time, event, src, dst, skillname, id) -> None:
        """An event that was held back before delivery."""
        self.log("Delayed")

    def instance_start(self, time, start_time) -> None:
        """The server started the instance."""
        self.log("InstanceStart")

    def tickrate(self, time, data) -> None:
        """Periodic tick rate report."""
        self.log("Tickrate")

    def last90_before_down(self, time, enemy_agent, since_time) -> None:
        """An enemy went down; ``since_time`` is ms since it was last at 90%."""
        self.log("Last90BeforeDown")

    def activation(self, time, event, src, dst, skillname, id) -> None:
        """A skill activation."""
        self.log("Activation")

    def buff_remove(self, time, event, src, dst, skillname, id, stack_id) -> None:
        """A buff stack was removed."""
        self.log("BuffRemove")

    def buff_damage(self, time, event, src, dst, skillname, id) -> None:
        """A buff dealt damage."""
        self.log("BuffDamage")

    def buff_apply(self, time, event, src, dst, skillname, id, stack_id) -> None:
        """A buff stack was applied."""
        self.log("BuffApply")

    def strike(self, time, event, src, dst, skillname, id) -> None:
        """A direct hit."""
        self.log("Strike")

    def buff_initial(self, time, event, src, dst, skillname, id, stack_id) -> None:
        """A buff present when the log started."""
        self.log("BuffInitial")

    def log(self, text) -> None:
        """Sink for diagnostic messages; writes them at debug level by default."""
        _logger.debug("%s", text)
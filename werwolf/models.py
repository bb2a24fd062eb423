"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


MAX_NAME_LENGTH = 50


def normalise_name(name: str) -> str:
    """玩家身份按去空白、忽略大小写后的名字判定。"""
    return name.strip().casefold()


class Team(str, Enum):
    """阵营。"""

    WEREWOLF = "werewolf"
    VILLAGER = "villager"

    @property
    def display_name(self) -> str:
        return "Werewolves" if self is Team.WEREWOLF else "Villagers"


class ActionTiming(str, Enum):
    """夜间行动类型。"""

    INVESTIGATION = "investigation"
    ELIMINATION = "elimination"
    PROTECTION = "protection"
    NONE = "none"


@dataclass(frozen=True)
class RoleInfo:
    team: Team
    night_action_priority: Optional[int]
    action_timing: ActionTiming
    display_name: str
    description: str
    short_description: str
    night_action_description: str
    night_instructions: str


class Role(str, Enum):
    """玩家身份角色。"""

    WEREWOLF = "werewolf"
    SEER = "seer"
    DOCTOR = "doctor"
    VILLAGER = "villager"

    @property
    def info(self) -> RoleInfo:
        return ROLE_CATALOG[self]

    @property
    def team(self) -> Team:
        return self.info.team

    @property
    def is_werewolf(self) -> bool:
        return self.info.team is Team.WEREWOLF

    @property
    def has_night_action(self) -> bool:
        return self.info.night_action_priority is not None

    @property
    def night_action_priority(self) -> Optional[int]:
        return self.info.night_action_priority

    @property
    def display_name(self) -> str:
        return self.info.display_name


ROLE_CATALOG: Dict[Role, RoleInfo] = {
    Role.WEREWOLF: RoleInfo(
        team=Team.WEREWOLF,
        night_action_priority=2,
        action_timing=ActionTiming.ELIMINATION,
        display_name="Werewolf",
        description=(
            "You are a werewolf! Each night, work with other werewolves to eliminate a villager. "
            "Your goal is to equal or outnumber the villagers. During the day, blend in and avoid suspicion."
        ),
        short_description="Eliminate villagers at night",
        night_action_description="Choose a villager to eliminate",
        night_instructions=(
            "Work with the other werewolves to choose who to eliminate tonight. "
            "Agree quietly on your target."
        ),
    ),
    Role.SEER: RoleInfo(
        team=Team.VILLAGER,
        night_action_priority=1,
        action_timing=ActionTiming.INVESTIGATION,
        display_name="Seer",
        description=(
            "You are the seer! Each night, you can investigate one player to learn if they are a werewolf. "
            "Use this knowledge wisely during day discussions."
        ),
        short_description="Investigate players at night",
        night_action_description="Choose a player to investigate",
        night_instructions=(
            "As the seer, choose one player to investigate. You will learn if they are a werewolf or not."
        ),
    ),
    Role.DOCTOR: RoleInfo(
        team=Team.VILLAGER,
        night_action_priority=3,
        action_timing=ActionTiming.PROTECTION,
        display_name="Doctor",
        description=(
            "You are the doctor! Each night, you can protect one player from werewolf attacks. "
            "You cannot protect the same player two nights in a row."
        ),
        short_description="Protect players from attacks",
        night_action_description="Choose a player to protect from attacks",
        night_instructions=(
            "As the doctor, choose one player to protect from werewolf attacks tonight. "
            "You cannot protect the same player twice in a row."
        ),
    ),
    Role.VILLAGER: RoleInfo(
        team=Team.VILLAGER,
        night_action_priority=None,
        action_timing=ActionTiming.NONE,
        display_name="Villager",
        description=(
            "You are a villager! You have no special abilities, but your vote and voice are crucial. "
            "Help identify the werewolves among you."
        ),
        short_description="Find and eliminate werewolves",
        night_action_description="No night action available",
        night_instructions="You have no night action. Simply confirm and pass the device to the next player.",
    ),
}


class GamePhase(str, Enum):
    """对局阶段。"""

    SETUP = "setup"
    ROLE_REVEAL = "role_reveal"
    NIGHT_PHASE = "night_phase"
    DAY_PHASE = "day_phase"
    VOTING = "voting"
    ELIMINATION = "elimination"
    GAME_OVER = "game_over"


class EliminationReason(str, Enum):
    """出局原因。"""

    WEREWOLF_KILL = "werewolf_kill"
    VOTING = "voting"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return {
            EliminationReason.WEREWOLF_KILL: "Eliminated by werewolves during the night",
            EliminationReason.VOTING: "Eliminated by village vote during the day",
            EliminationReason.UNKNOWN: "Eliminated for unknown reason",
        }[self]


class GameOutcome(str, Enum):
    """终局结果。"""

    VILLAGERS_WIN = "villagers_win"
    WEREWOLVES_WIN = "werewolves_win"

    @property
    def display_name(self) -> str:
        return "Villagers Win!" if self is GameOutcome.VILLAGERS_WIN else "Werewolves Win!"

    @property
    def description(self) -> str:
        if self is GameOutcome.VILLAGERS_WIN:
            return "All werewolves have been eliminated. The village is safe!"
        return "The werewolves equal or outnumber the villagers. The village has fallen!"


@dataclass(slots=True)
class Player:
    """运行期玩家状态，身份由 GameModel 私有保存。"""

    name: str
    is_alive: bool = True
    voted_for: Optional[str] = None
    elimination_reason: Optional[EliminationReason] = None
    elimination_time: Optional[datetime] = None

    @property
    def key(self) -> str:
        return normalise_name(self.name)

    @property
    def has_voted(self) -> bool:
        return self.voted_for is not None

    def cast_vote(self, target: str) -> None:
        if self.is_alive:
            self.voted_for = target

    def clear_vote(self) -> None:
        self.voted_for = None

    def eliminate(self, reason: EliminationReason = EliminationReason.UNKNOWN) -> bool:
        if not self.is_alive:
            return False
        self.is_alive = False
        self.elimination_reason = reason
        self.elimination_time = datetime.now()
        self.clear_vote()
        return True

    def revive(self) -> None:
        self.is_alive = True
        self.voted_for = None
        self.elimination_reason = None
        self.elimination_time = None


@dataclass(slots=True)
class VisiblePlayerInfo:
    """经过隐私过滤的玩家信息。"""

    name: str
    is_alive: bool
    role: Optional[Role] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_alive": self.is_alive,
            "role": self.role.value if self.role else None,
        }


@dataclass(frozen=True)
class DevicePassingInstructions:
    who: str
    what: str
    when: str


@dataclass(frozen=True)
class SeerResult:
    target: str
    is_werewolf: bool

    @property
    def message(self) -> str:
        if self.is_werewolf:
            return f"{self.target} is a Werewolf!"
        return f"{self.target} is not a Werewolf."


@dataclass(slots=True)
class NightResult:
    """夜晚结算结果。"""

    eliminated_player: Optional[str] = None
    survived_attack: bool = False
    seer_result: Optional[SeerResult] = None

    @property
    def has_elimination(self) -> bool:
        return self.eliminated_player is not None


@dataclass(slots=True)
class GameEvent:
    """状态变更通知，不携带任何私密信息。"""

    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    round_no: int = 0


class ActionError(str, Enum):
    """可恢复的操作拒绝原因。"""

    INVALID_PLAYER_COUNT = "invalid_player_count"
    EMPTY_NAME = "empty_name"
    NAME_TOO_LONG = "name_too_long"
    DUPLICATE_NAME = "duplicate_name"
    WRONG_PHASE = "wrong_phase"
    GAME_NOT_ACTIVE = "game_not_active"
    UNKNOWN_PLAYER = "unknown_player"
    PLAYER_ELIMINATED = "player_eliminated"
    INVALID_ACTOR = "invalid_actor"
    INVALID_TARGET = "invalid_target"
    CONSECUTIVE_PROTECTION = "consecutive_protection"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    INVALID_DISTRIBUTION = "invalid_distribution"


@dataclass(slots=True)
class ActionResult:
    """操作结果；成功时为真值。"""

    ok: bool
    error: Optional[ActionError] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str = "") -> "ActionResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: ActionError, message: str = "") -> "ActionResult":
        return cls(ok=False, error=error, message=message or error.value.replace("_", " "))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error.value if self.error else None,
            "message": self.message,
        }

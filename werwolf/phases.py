"""阶段流转表与阶段说明。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from .models import GamePhase


TRANSITIONS: Dict[GamePhase, FrozenSet[GamePhase]] = {
    GamePhase.SETUP: frozenset({GamePhase.ROLE_REVEAL}),
    GamePhase.ROLE_REVEAL: frozenset({GamePhase.NIGHT_PHASE}),
    GamePhase.NIGHT_PHASE: frozenset({GamePhase.DAY_PHASE}),
    GamePhase.DAY_PHASE: frozenset({GamePhase.VOTING}),
    GamePhase.VOTING: frozenset({GamePhase.ELIMINATION}),
    GamePhase.ELIMINATION: frozenset({GamePhase.NIGHT_PHASE, GamePhase.GAME_OVER}),
    GamePhase.GAME_OVER: frozenset(),
}

PRIVATE_PHASES = frozenset({GamePhase.ROLE_REVEAL, GamePhase.NIGHT_PHASE, GamePhase.VOTING})


@dataclass(frozen=True)
class PhaseInfo:
    display_name: str
    instructions: str
    device_instructions: str
    suggested_duration: float
    uses_timer: bool


PHASE_INFO: Dict[GamePhase, PhaseInfo] = {
    GamePhase.SETUP: PhaseInfo(
        "Game Setup",
        "Enter player names and prepare to start the game. Make sure everyone understands the rules.",
        "Device stays in the center where everyone can see.",
        0.0,
        False,
    ),
    GamePhase.ROLE_REVEAL: PhaseInfo(
        "Role Reveal",
        "Each player will privately see their role. Pass the device around so everyone can view their secret role.",
        "Pass device to each player in turn to view their role privately.",
        30.0,
        True,
    ),
    GamePhase.NIGHT_PHASE: PhaseInfo(
        "Night Phase",
        "Close your eyes! Each player takes the device in turn; players with night actions act privately.",
        "Pass device to each living player in turn; only night roles make a choice.",
        60.0,
        True,
    ),
    GamePhase.DAY_PHASE: PhaseInfo(
        "Day Discussion",
        "Open your eyes and discuss. Talk about what happened during the night and share suspicions.",
        "Device stays in the center where everyone can see.",
        300.0,
        True,
    ),
    GamePhase.VOTING: PhaseInfo(
        "Voting",
        "Time to vote! Each player will privately cast their vote to eliminate someone.",
        "Pass device to each living player to cast their vote privately.",
        30.0,
        True,
    ),
    GamePhase.ELIMINATION: PhaseInfo(
        "Elimination",
        "The votes have been tallied. See who has been eliminated from the village.",
        "Device stays in the center where everyone can see.",
        3.0,
        False,
    ),
    GamePhase.GAME_OVER: PhaseInfo(
        "Game Over",
        "The game is over! See which team has won and view the final results.",
        "Device stays in the center where everyone can see.",
        5.0,
        False,
    ),
}


def can_transition(source: GamePhase, target: GamePhase) -> bool:
    return target in TRANSITIONS[source]


def can_end_game(phase: GamePhase) -> bool:
    """胜负一旦成立，任何进行中的阶段都可以直接结束对局。"""
    return phase not in (GamePhase.SETUP, GamePhase.GAME_OVER)


def next_phase(phase: GamePhase) -> Optional[GamePhase]:
    """唯一后继；淘汰阶段取决于胜负判定，返回 None。"""
    targets = TRANSITIONS[phase]
    if len(targets) != 1:
        return None
    return next(iter(targets))


def requires_private_device_pass(phase: GamePhase) -> bool:
    return phase in PRIVATE_PHASES


def is_group_phase(phase: GamePhase) -> bool:
    return not requires_private_device_pass(phase)


def phase_info(phase: GamePhase) -> PhaseInfo:
    return PHASE_INFO[phase]

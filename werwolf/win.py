"""胜负判定。"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Tuple

from .models import GameOutcome, Player, Role


def evaluate(alive_werewolves: int, alive_villager_team: int) -> Optional[GameOutcome]:
    if alive_werewolves == 0:
        return GameOutcome.VILLAGERS_WIN
    if alive_werewolves >= alive_villager_team:
        return GameOutcome.WEREWOLVES_WIN
    return None


def count_alive_teams(players: Iterable[Player], role_map: Mapping[str, Role]) -> Tuple[int, int]:
    """返回 (存活狼人数, 存活好人数)。"""
    wolves = villagers = 0
    for player in players:
        if not player.is_alive:
            continue
        if role_map.get(player.name) is Role.WEREWOLF:
            wolves += 1
        else:
            villagers += 1
    return wolves, villagers

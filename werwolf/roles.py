"""身份配比与随机分配。"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import Role


MIN_PLAYERS = 3
MAX_PLAYERS = 12


class InvalidPlayerCountError(ValueError):
    pass


class InvalidDistributionError(ValueError):
    pass


@dataclass(frozen=True)
class RoleDistribution:
    """各身份数量。"""

    werewolves: int
    seer: int
    doctor: int
    villagers: int

    @property
    def villager_team(self) -> int:
        return self.seer + self.doctor + self.villagers

    @property
    def total(self) -> int:
        return self.werewolves + self.villager_team

    def count(self, role: Role) -> int:
        return {
            Role.WEREWOLF: self.werewolves,
            Role.SEER: self.seer,
            Role.DOCTOR: self.doctor,
            Role.VILLAGER: self.villagers,
        }[role]

    def to_dict(self) -> Dict[str, int]:
        return {
            "werewolves": self.werewolves,
            "seer": self.seer,
            "doctor": self.doctor,
            "villagers": self.villagers,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "RoleDistribution":
        try:
            return cls(
                werewolves=int(data.get("werewolves", 0)),
                seer=int(data.get("seer", 0)),
                doctor=int(data.get("doctor", 0)),
                villagers=int(data.get("villagers", 0)),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidDistributionError(f"Invalid role counts: {data!r}") from exc


DEFAULT_DISTRIBUTIONS: Dict[int, RoleDistribution] = {
    3: RoleDistribution(werewolves=1, seer=1, doctor=0, villagers=1),
    4: RoleDistribution(werewolves=1, seer=1, doctor=1, villagers=1),
    5: RoleDistribution(werewolves=1, seer=1, doctor=1, villagers=2),
    6: RoleDistribution(werewolves=2, seer=1, doctor=1, villagers=2),
    7: RoleDistribution(werewolves=2, seer=1, doctor=1, villagers=3),
    8: RoleDistribution(werewolves=2, seer=1, doctor=1, villagers=4),
    9: RoleDistribution(werewolves=3, seer=1, doctor=1, villagers=4),
    10: RoleDistribution(werewolves=3, seer=1, doctor=1, villagers=5),
    11: RoleDistribution(werewolves=3, seer=1, doctor=1, villagers=6),
    12: RoleDistribution(werewolves=4, seer=1, doctor=1, villagers=6),
}


@dataclass(frozen=True)
class BalanceReport:
    is_balanced: bool
    description: str


def is_valid_player_count(count: int) -> bool:
    return MIN_PLAYERS <= count <= MAX_PLAYERS


def role_distribution(count: int) -> Optional[RoleDistribution]:
    return DEFAULT_DISTRIBUTIONS.get(count)


def evaluate_balance(distribution: RoleDistribution) -> BalanceReport:
    """按狼人占比评估配置是否可玩。"""
    wolves = distribution.werewolves
    village = distribution.villager_team
    if wolves == 0:
        return BalanceReport(False, "No werewolves - villagers auto-win")
    if village == 0:
        return BalanceReport(False, "No villagers - werewolves auto-win")
    if wolves >= village:
        return BalanceReport(False, "Too many werewolves - unfair advantage")
    ratio = wolves / (wolves + village)
    if ratio < 0.2:
        return BalanceReport(True, "Villager-favored - easier for village")
    if ratio > 0.35:
        return BalanceReport(True, "Werewolf-favored - harder for village")
    return BalanceReport(True, "Well balanced - fair for both teams")


def validate_distribution(distribution: RoleDistribution) -> None:
    counts = distribution.to_dict().values()
    if any(value < 0 for value in counts):
        raise InvalidDistributionError("Role counts cannot be negative")
    if distribution.seer > 1 or distribution.doctor > 1:
        raise InvalidDistributionError("At most one seer and one doctor are supported")
    report = evaluate_balance(distribution)
    if not report.is_balanced:
        raise InvalidDistributionError(report.description)
    if not is_valid_player_count(distribution.total):
        raise InvalidDistributionError(
            f"Distribution covers {distribution.total} players, expected {MIN_PLAYERS}-{MAX_PLAYERS}"
        )


def build_roles(distribution: RoleDistribution) -> List[Role]:
    roles: List[Role] = []
    for role in (Role.WEREWOLF, Role.SEER, Role.DOCTOR, Role.VILLAGER):
        roles.extend([role] * distribution.count(role))
    return roles


def assign(
    player_names: Sequence[str],
    distribution: Optional[RoleDistribution] = None,
    rng: Optional[random.Random] = None,
) -> Dict[str, Role]:
    """把洗好的身份按原顺序发给玩家，返回名字到身份的一一映射。"""
    count = len(player_names)
    if not is_valid_player_count(count):
        raise InvalidPlayerCountError(
            f"{count} players; a game needs {MIN_PLAYERS}-{MAX_PLAYERS}"
        )
    if distribution is None:
        distribution = DEFAULT_DISTRIBUTIONS[count]
    elif distribution.total != count:
        raise InvalidPlayerCountError(
            f"{count} players but the role distribution covers {distribution.total}"
        )
    roles = build_roles(distribution)
    (rng or random.Random()).shuffle(roles)
    return dict(zip(player_names, roles))


__all__ = [
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "DEFAULT_DISTRIBUTIONS",
    "BalanceReport",
    "InvalidDistributionError",
    "InvalidPlayerCountError",
    "RoleDistribution",
    "assign",
    "build_roles",
    "evaluate_balance",
    "is_valid_player_count",
    "role_distribution",
    "validate_distribution",
]

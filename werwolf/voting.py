"""白天投票计票与平票处理。"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Union


class TiePolicy(str, Enum):
    """平票处理方式。"""

    RANDOM = "random"
    NO_ELIMINATION = "no_elimination"


@dataclass(frozen=True)
class Elimination:
    player: str


@dataclass(frozen=True)
class Tie:
    candidates: FrozenSet[str] = field(default_factory=frozenset)


VoteOutcome = Union[Elimination, Tie]


def count_votes(votes: Mapping[str, str]) -> Dict[str, int]:
    return dict(Counter(votes.values()))


def tally_counts(counts: Mapping[str, int]) -> VoteOutcome:
    if not counts:
        return Tie()
    top_count = max(counts.values())
    contenders = frozenset(target for target, cnt in counts.items() if cnt == top_count)
    if len(contenders) == 1:
        return Elimination(next(iter(contenders)))
    return Tie(contenders)


def tally(votes: Mapping[str, str]) -> VoteOutcome:
    """votes: 投票人 -> 被投人。自投照常计票。"""
    return tally_counts(count_votes(votes))


def resolve_elimination(
    outcome: VoteOutcome,
    policy: TiePolicy = TiePolicy.RANDOM,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    if isinstance(outcome, Elimination):
        return outcome.player
    if not outcome.candidates or policy is TiePolicy.NO_ELIMINATION:
        return None
    return (rng or random.Random()).choice(sorted(outcome.candidates))

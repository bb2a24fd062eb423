"""对局纪要：按轮记录夜晚结算、投票与阶段快照。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .models import GamePhase, NightResult


@dataclass
class NightRecord:
    events: List[Dict[str, object]] = field(default_factory=list)
    eliminated: Optional[str] = None
    survived_attack: bool = False


@dataclass
class DayRecord:
    votes: Dict[str, str] = field(default_factory=dict)
    tallies: Dict[str, int] = field(default_factory=dict)
    tie_candidates: List[str] = field(default_factory=list)
    eliminated: Optional[str] = None


@dataclass
class RoundRecord:
    round: int
    night: NightRecord = field(default_factory=NightRecord)
    day: DayRecord = field(default_factory=DayRecord)


@dataclass
class PhaseSnapshot:
    phase: GamePhase
    alive_players: List[str]
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Chronicle:
    rounds: Dict[int, RoundRecord] = field(default_factory=dict)
    snapshots: List[PhaseSnapshot] = field(default_factory=list)
    global_summary: List[str] = field(default_factory=list)

    def ensure_round(self, round_no: int) -> RoundRecord:
        if round_no not in self.rounds:
            self.rounds[round_no] = RoundRecord(round=round_no)
        return self.rounds[round_no]

    def record_snapshot(self, phase: GamePhase, alive_players: List[str]) -> None:
        self.snapshots.append(PhaseSnapshot(phase=phase, alive_players=list(alive_players)))

    def log_night_event(self, round_no: int, event: Dict[str, object]) -> None:
        record = self.ensure_round(round_no)
        record.night.events.append(event)

    def set_night_result(self, round_no: int, result: NightResult) -> None:
        record = self.ensure_round(round_no)
        record.night.eliminated = result.eliminated_player
        record.night.survived_attack = result.survived_attack
        if result.eliminated_player:
            self.append_summary(f"Night {round_no}: {result.eliminated_player} was killed")
        elif result.survived_attack:
            self.append_summary(f"Night {round_no}: the attack was stopped")
        else:
            self.append_summary(f"Night {round_no}: nobody died")

    def set_vote_result(
        self,
        round_no: int,
        votes: Dict[str, str],
        tallies: Dict[str, int],
        tie_candidates: List[str],
        eliminated: Optional[str],
    ) -> None:
        record = self.ensure_round(round_no)
        record.day.votes = dict(votes)
        record.day.tallies = dict(tallies)
        record.day.tie_candidates = sorted(tie_candidates)
        record.day.eliminated = eliminated
        if eliminated:
            self.append_summary(f"Day {round_no}: {eliminated} was voted out")
        else:
            self.append_summary(f"Day {round_no}: no one was voted out")

    def append_summary(self, text: str) -> None:
        if text not in self.global_summary:
            self.global_summary.append(text)

    def clear(self) -> None:
        self.rounds.clear()
        self.snapshots.clear()
        self.global_summary.clear()

    def to_dict(self) -> Dict[str, object]:
        return {
            "rounds": {
                round_no: {
                    "night": {
                        "events": record.night.events,
                        "eliminated": record.night.eliminated,
                        "survived_attack": record.night.survived_attack,
                    },
                    "day": {
                        "votes": record.day.votes,
                        "tallies": record.day.tallies,
                        "tie_candidates": record.day.tie_candidates,
                        "eliminated": record.day.eliminated,
                    },
                }
                for round_no, record in sorted(self.rounds.items())
            },
            "global_summary": list(self.global_summary),
        }

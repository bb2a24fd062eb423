"""对局状态机：GameModel 独占全部可变状态，组合各规则组件。

所有面向玩家输入的操作都返回 ActionResult，不会因规则违例抛异常；
校验全部先于写入，失败时状态保持不变。
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import night, privacy, voting, win
from . import roles as role_rules
from .chronicle import Chronicle
from .config import GameConfig
from .device import DevicePassingCoordinator
from .models import (
    MAX_NAME_LENGTH,
    ActionError,
    ActionResult,
    DevicePassingInstructions,
    EliminationReason,
    GameEvent,
    GameOutcome,
    GamePhase,
    NightResult,
    Player,
    Role,
    SeerResult,
    VisiblePlayerInfo,
    normalise_name,
)
from .phases import can_end_game, can_transition, phase_info, requires_private_device_pass
from .roles import InvalidDistributionError, InvalidPlayerCountError, RoleDistribution


logger = logging.getLogger("werwolf")

Listener = Callable[[GameEvent], None]


class GameModel:
    """单设备传递式狼人杀的一局对局。"""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.device = DevicePassingCoordinator()
        self.chronicle = Chronicle()

        self.players: List[Player] = []
        self.phase = GamePhase.SETUP
        self.is_game_active = False
        self.current_player_index: Optional[int] = None
        self.outcome: Optional[GameOutcome] = None
        self.round_no = 0
        self.role_distribution: Optional[RoleDistribution] = None
        self.last_night_result: Optional[NightResult] = None
        self.last_vote_outcome: Optional[voting.VoteOutcome] = None
        self.last_vote_eliminated: Optional[str] = None

        self._roles: Dict[str, Role] = {}
        self._votes: Dict[str, str] = {}
        self._tallies: Dict[str, int] = {}
        self._night = night.NightSubmissions()
        self._previous_doctor_target: Optional[str] = None
        self._listeners: List[Listener] = []

        if self.config.role_distribution is not None:
            role_rules.validate_distribution(self.config.role_distribution)
            self.role_distribution = self.config.role_distribution

    # ---------------------------------------------------------------- events --
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event_type: str, **data: Any) -> None:
        event = GameEvent(type=event_type, data=data, round_no=self.round_no)
        logger.debug("Round %s: %s - %s", self.round_no, event_type, data)
        for listener in list(self._listeners):
            listener(event)

    def _reject(self, error: ActionError, message: str = "") -> ActionResult:
        result = ActionResult.failure(error, message)
        logger.debug("Rejected in %s: %s (%s)", self.phase.value, error.value, result.message)
        return result

    # --------------------------------------------------------------- roster --
    def find_player(self, name: str) -> Optional[Player]:
        if not isinstance(name, str):
            return None
        key = normalise_name(name)
        return next((p for p in self.players if p.key == key), None)

    def player_names(self) -> List[str]:
        return [p.name for p in self.players]

    def alive_players(self) -> List[Player]:
        return [p for p in self.players if p.is_alive]

    def eliminated_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_alive]

    def is_player_alive(self, name: str) -> bool:
        player = self.find_player(name)
        return player is not None and player.is_alive

    def _require_living(self, name: str) -> Tuple[Optional[Player], Optional[ActionResult]]:
        player = self.find_player(name)
        if player is None:
            return None, self._reject(ActionError.UNKNOWN_PLAYER, f"No player named {name!r}")
        if not player.is_alive:
            return None, self._reject(ActionError.PLAYER_ELIMINATED, f"{player.name} has been eliminated")
        return player, None

    # ---------------------------------------------------------------- setup --
    def add_players(self, names: Iterable[str]) -> ActionResult:
        if self.phase is not GamePhase.SETUP:
            return self._reject(ActionError.WRONG_PHASE, "Players can only be added during setup")
        seen = {p.key for p in self.players}
        accepted: List[str] = []
        for raw in names:
            name = raw.strip() if isinstance(raw, str) else ""
            if not name:
                return self._reject(ActionError.EMPTY_NAME, "Player name cannot be empty")
            if len(name) > MAX_NAME_LENGTH:
                return self._reject(
                    ActionError.NAME_TOO_LONG,
                    f"Player name is too long (maximum {MAX_NAME_LENGTH} characters)",
                )
            key = normalise_name(name)
            if key in seen:
                return self._reject(ActionError.DUPLICATE_NAME, f"A player named {name} already exists")
            seen.add(key)
            accepted.append(name)
        if len(self.players) + len(accepted) > role_rules.MAX_PLAYERS:
            return self._reject(
                ActionError.INVALID_PLAYER_COUNT,
                f"A game supports at most {role_rules.MAX_PLAYERS} players",
            )
        self.players.extend(Player(name=name) for name in accepted)
        self._emit("players_changed", players=self.player_names())
        return ActionResult.success(f"Added {len(accepted)} player(s)")

    def add_player(self, name: str) -> ActionResult:
        return self.add_players([name])

    def remove_player(self, name: str) -> ActionResult:
        if self.phase is not GamePhase.SETUP:
            return self._reject(ActionError.WRONG_PHASE, "Players can only be removed during setup")
        player = self.find_player(name)
        if player is None:
            return self._reject(ActionError.UNKNOWN_PLAYER, f"No player named {name!r}")
        self.players.remove(player)
        self._emit("players_changed", players=self.player_names())
        return ActionResult.success(f"Removed {player.name}")

    def clear_players(self) -> ActionResult:
        if self.phase is not GamePhase.SETUP:
            return self._reject(ActionError.WRONG_PHASE, "Players can only be removed during setup")
        self.players.clear()
        self._emit("players_changed", players=[])
        return ActionResult.success()

    def set_role_distribution(self, distribution: Optional[RoleDistribution]) -> ActionResult:
        """传 None 恢复按人数的默认配比。"""
        if self.phase is not GamePhase.SETUP:
            return self._reject(ActionError.WRONG_PHASE, "Roles can only be changed during setup")
        if distribution is not None:
            try:
                role_rules.validate_distribution(distribution)
            except InvalidDistributionError as exc:
                return self._reject(ActionError.INVALID_DISTRIBUTION, str(exc))
        self.role_distribution = distribution
        self._emit("roles_configured", custom=distribution is not None)
        return ActionResult.success()

    def start_game(self) -> ActionResult:
        if self.phase is not GamePhase.SETUP:
            return self._reject(ActionError.WRONG_PHASE, "The game has already started")
        try:
            assignments = role_rules.assign(self.player_names(), self.role_distribution, self.rng)
        except InvalidPlayerCountError as exc:
            return self._reject(ActionError.INVALID_PLAYER_COUNT, str(exc))

        for player in self.players:
            player.revive()
        self._roles = assignments
        self._votes.clear()
        self._tallies = {}
        self._night.clear()
        self._previous_doctor_target = None
        self.outcome = None
        self.round_no = 0
        self.last_night_result = None
        self.last_vote_outcome = None
        self.last_vote_eliminated = None
        self.chronicle.clear()
        self.is_game_active = True

        logger.info("Game started with %d players", len(self.players))
        self._emit("game_started", player_count=len(self.players))
        self._enter_phase(GamePhase.ROLE_REVEAL)
        return ActionResult.success("Roles assigned")

    # ----------------------------------------------------------- lifecycle --
    def _enter_phase(self, phase: GamePhase) -> None:
        allowed = can_transition(self.phase, phase) or (
            phase is GamePhase.GAME_OVER and can_end_game(self.phase)
        )
        if not allowed:
            raise RuntimeError(f"Illegal phase transition {self.phase.value} -> {phase.value}")
        previous = self.phase
        self.phase = phase
        if requires_private_device_pass(phase) and self.alive_players():
            self.current_player_index = 0
        else:
            self.current_player_index = None
        self.chronicle.record_snapshot(phase, [p.name for p in self.alive_players()])
        logger.debug("Phase %s -> %s", previous.value, phase.value)
        self._emit("phase_changed", previous=previous.value, phase=phase.value)

    def advance_to_next_phase(self) -> ActionResult:
        if self.phase is GamePhase.SETUP:
            return self.start_game()
        if not self.is_game_active:
            return self._reject(ActionError.GAME_NOT_ACTIVE, "The game is over")

        if self.phase is GamePhase.ROLE_REVEAL:
            self._begin_night()
        elif self.phase is GamePhase.NIGHT_PHASE:
            self._end_night()
        elif self.phase is GamePhase.DAY_PHASE:
            if len(self.alive_players()) < 2:
                return self._reject(ActionError.NOT_ENOUGH_PLAYERS, "Voting needs at least two living players")
            self._begin_voting()
        elif self.phase is GamePhase.VOTING:
            self._close_voting()
        elif self.phase is GamePhase.ELIMINATION:
            outcome = self.check_game_outcome()
            if outcome is not None:
                self._finish(outcome)
            else:
                self._begin_night()
        return ActionResult.success(phase_info(self.phase).display_name)

    def _begin_night(self) -> None:
        self.round_no += 1
        self._night.clear()
        self.chronicle.ensure_round(self.round_no)
        self._enter_phase(GamePhase.NIGHT_PHASE)

    def _alive_or_none(self, name: Optional[str]) -> Optional[str]:
        return name if name is not None and self.is_player_alive(name) else None

    def _end_night(self) -> None:
        submissions = self._night
        result = night.resolve(
            self._roles,
            seer_target=submissions.seer_target,
            werewolf_target=self._alive_or_none(submissions.werewolf_target),
            doctor_target=submissions.doctor_target,
        )
        self._previous_doctor_target = submissions.doctor_target
        self.last_night_result = result
        if result.eliminated_player is not None:
            self._apply_elimination(result.eliminated_player, EliminationReason.WEREWOLF_KILL)
        elif result.survived_attack:
            logger.info("Night %d: the werewolf attack was stopped", self.round_no)
        self.chronicle.set_night_result(self.round_no, result)

        outcome = self.check_game_outcome()
        if outcome is not None:
            self._finish(outcome)
            return
        self._enter_phase(GamePhase.DAY_PHASE)

    def _begin_voting(self) -> None:
        self._votes.clear()
        for player in self.players:
            player.clear_vote()
        self._enter_phase(GamePhase.VOTING)

    def _close_voting(self) -> None:
        counts = voting.count_votes(self._votes)
        self._tallies = counts
        outcome = voting.tally_counts(counts)
        eliminated = voting.resolve_elimination(outcome, self.config.tie_policy, self.rng)
        if eliminated is not None and not self._apply_elimination(eliminated, EliminationReason.VOTING):
            eliminated = None
        self.last_vote_outcome = outcome
        self.last_vote_eliminated = eliminated
        ties = sorted(outcome.candidates) if isinstance(outcome, voting.Tie) else []
        if ties:
            logger.info("Vote tied between %s; eliminated: %s", ", ".join(ties), eliminated or "nobody")
        self.chronicle.set_vote_result(self.round_no, self._votes, counts, ties, eliminated)
        self._enter_phase(GamePhase.ELIMINATION)

    def _finish(self, outcome: GameOutcome) -> None:
        self.outcome = outcome
        self.is_game_active = False
        self.chronicle.append_summary(outcome.display_name)
        logger.info("Game over: %s", outcome.value)
        self._enter_phase(GamePhase.GAME_OVER)
        self._emit("game_over", outcome=outcome.value)

    def check_game_outcome(self) -> Optional[GameOutcome]:
        if not self._roles:
            return None
        wolves, villagers = win.count_alive_teams(self.players, self._roles)
        return win.evaluate(wolves, villagers)

    def reset(self, keep_players: bool = True) -> ActionResult:
        """丢弃本局，回到 setup；可保留名单再开一局。"""
        previous = self.phase
        if keep_players:
            for player in self.players:
                player.revive()
        else:
            self.players.clear()
        self._roles.clear()
        self._votes.clear()
        self._tallies = {}
        self._night.clear()
        self._previous_doctor_target = None
        self.phase = GamePhase.SETUP
        self.is_game_active = False
        self.current_player_index = None
        self.outcome = None
        self.round_no = 0
        self.last_night_result = None
        self.last_vote_outcome = None
        self.last_vote_eliminated = None
        self.chronicle.clear()
        self._emit("game_reset", previous=previous.value, players=self.player_names())
        return ActionResult.success()

    # ------------------------------------------------------- device passing --
    @property
    def current_player(self) -> Optional[Player]:
        if self.current_player_index is None:
            return None
        alive = self.alive_players()
        if not alive:
            return None
        return alive[self.current_player_index % len(alive)]

    def advance_current_player(self) -> ActionResult:
        if not self.is_game_active or not requires_private_device_pass(self.phase):
            return self._reject(ActionError.WRONG_PHASE, "The device stays in the center during this phase")
        alive = self.alive_players()
        if not alive:
            return self._reject(ActionError.NOT_ENOUGH_PLAYERS, "No living players")
        index = -1 if self.current_player_index is None else self.current_player_index
        self.current_player_index = (index + 1) % len(alive)
        holder = alive[self.current_player_index]
        self._emit("current_player_changed", name=holder.name)
        return ActionResult.success(holder.name)

    def current_device_passing_instructions(self) -> DevicePassingInstructions:
        holder = self.current_player
        name = holder.name if holder else None
        role = self._roles.get(name) if name else None
        return self.device.instructions(self.phase, name, role)

    def night_wake_order(self) -> List[Role]:
        return night.night_wake_order(self._roles.values())

    # ------------------------------------------------------------- privacy --
    def player_role(self, name: str) -> Optional[Role]:
        player = self.find_player(name)
        return self._roles.get(player.name) if player else None

    def visible_player_info(self, subject: str, viewer: str) -> VisiblePlayerInfo:
        player = self.find_player(subject)
        if player is None:
            return VisiblePlayerInfo(name=subject, is_alive=False)
        viewer_player = self.find_player(viewer)
        viewer_name = viewer_player.name if viewer_player else viewer
        return privacy.visible_info(player, viewer_name, self.phase, self._roles)

    def visible_roster(self, viewer: str) -> List[VisiblePlayerInfo]:
        return [self.visible_player_info(p.name, viewer) for p in self.players]

    def werewolf_teammates(self, viewer: str) -> List[str]:
        player = self.find_player(viewer)
        if player is None:
            return []
        return privacy.werewolf_teammates(player.name, self.phase, self._roles)

    # -------------------------------------------------------------- voting --
    def record_vote(self, voter: str, target: str) -> ActionResult:
        if self.phase is not GamePhase.VOTING:
            return self._reject(ActionError.WRONG_PHASE, "Votes can only be cast during voting")
        voter_player, error = self._require_living(voter)
        if error is not None:
            return error
        target_player, error = self._require_living(target)
        if error is not None:
            return ActionResult.failure(ActionError.INVALID_TARGET, error.message)
        self._votes[voter_player.name] = target_player.name
        voter_player.cast_vote(target_player.name)
        self._emit("vote_recorded", voter=voter_player.name)
        return ActionResult.success()

    def visible_vote_status(self) -> Dict[str, bool]:
        """投票期间只公开谁已投票，不公开投给谁。"""
        if self.phase is not GamePhase.VOTING:
            return {}
        return {p.name: p.name in self._votes for p in self.alive_players()}

    def voting_results(self) -> Optional[Dict[str, int]]:
        if self.phase not in (GamePhase.ELIMINATION, GamePhase.GAME_OVER):
            return None
        return dict(self._tallies)

    # ------------------------------------------------------- night actions --
    def record_werewolf_choice(self, actor: str, target: str) -> ActionResult:
        return self._record_night_choice(Role.WEREWOLF, actor, target)

    def record_seer_choice(self, actor: str, target: str) -> ActionResult:
        return self._record_night_choice(Role.SEER, actor, target)

    def record_doctor_choice(self, actor: str, target: str) -> ActionResult:
        return self._record_night_choice(Role.DOCTOR, actor, target)

    def _record_night_choice(self, role: Role, actor: str, target: str) -> ActionResult:
        if self.phase is not GamePhase.NIGHT_PHASE:
            return self._reject(ActionError.WRONG_PHASE, "Night actions can only be taken at night")
        actor_player, error = self._require_living(actor)
        if error is not None:
            return error
        if self._roles.get(actor_player.name) is not role:
            return self._reject(ActionError.INVALID_ACTOR, f"{actor_player.name} cannot act as the {role.display_name}")
        target_player, error = self._require_living(target)
        if error is not None:
            return ActionResult.failure(ActionError.INVALID_TARGET, error.message)

        if role is Role.WEREWOLF:
            if self._roles.get(target_player.name) is Role.WEREWOLF:
                return self._reject(ActionError.INVALID_TARGET, "Werewolves cannot target a werewolf")
            self._night.werewolf_target = target_player.name
        elif role is Role.SEER:
            self._night.seer_target = target_player.name
        else:
            if not night.can_protect(target_player.name, self._previous_doctor_target):
                return self._reject(
                    ActionError.CONSECUTIVE_PROTECTION,
                    f"The doctor cannot protect {target_player.name} two nights in a row",
                )
            self._night.doctor_target = target_player.name

        self.chronicle.log_night_event(
            self.round_no,
            {"t": f"N{self.round_no}_{role.value}", "from": actor_player.name, "target": target_player.name},
        )
        self._emit("night_action_recorded")
        return ActionResult.success()

    def seer_result(self, viewer: str) -> Optional[SeerResult]:
        """只有预言家本人能看到查验结果。"""
        player = self.find_player(viewer)
        if player is None or self._roles.get(player.name) is not Role.SEER:
            return None
        if self.phase is GamePhase.NIGHT_PHASE:
            if self._night.seer_target is None:
                return None
            return night.investigate(self._night.seer_target, self._roles)
        if self.last_night_result is None:
            return None
        return self.last_night_result.seer_result

    def night_report(self) -> Optional[Dict[str, Any]]:
        if self.last_night_result is None:
            return None
        return {
            "round": self.round_no,
            "eliminated": self.last_night_result.eliminated_player,
            "survived_attack": self.last_night_result.survived_attack,
        }

    # --------------------------------------------------------- elimination --
    def _apply_elimination(self, name: str, reason: EliminationReason) -> bool:
        player = self.find_player(name)
        if player is None or not player.eliminate(reason):
            return False
        logger.info("%s eliminated (%s)", player.name, reason.value)
        self._emit("player_eliminated", name=player.name, reason=reason.value)
        return True

    def eliminate_player(self, name: str, reason: EliminationReason = EliminationReason.UNKNOWN) -> bool:
        """只在对局进行中生效；重复淘汰同一人无副作用，返回 False。"""
        if not self.is_game_active:
            return False
        if not self._apply_elimination(name, reason):
            return False
        if self.phase is GamePhase.VOTING:
            # 被淘汰者的选票作废，投给他的票也作废
            eliminated = self.find_player(name).name
            self._votes = {
                voter: target
                for voter, target in self._votes.items()
                if voter != eliminated and target != eliminated
            }
            for player in self.players:
                if player.voted_for == eliminated:
                    player.clear_vote()
        outcome = self.check_game_outcome()
        if outcome is not None:
            self._finish(outcome)
        return True

    # ------------------------------------------------------------- readout --
    def public_state(self) -> Dict[str, Any]:
        """任何人都能看的状态，用于界面渲染。"""
        holder = self.current_player
        instructions = self.current_device_passing_instructions()
        info = phase_info(self.phase)
        return {
            "phase": self.phase.value,
            "phase_name": info.display_name,
            "phase_instructions": info.instructions,
            "device_instructions": info.device_instructions,
            "round": self.round_no,
            "is_game_active": self.is_game_active,
            "players": [{"name": p.name, "is_alive": p.is_alive} for p in self.players],
            "current_player": holder.name if holder else None,
            "instructions": {"who": instructions.who, "what": instructions.what, "when": instructions.when},
            "vote_status": self.visible_vote_status(),
            "night_report": self.night_report() if self.phase is not GamePhase.NIGHT_PHASE else None,
            "vote_tallies": self.voting_results(),
            "vote_eliminated": self.last_vote_eliminated if self.phase is GamePhase.ELIMINATION else None,
            "outcome": self.outcome.value if self.outcome else None,
        }

    def final_results(self) -> Optional[Dict[str, Any]]:
        if self.phase is not GamePhase.GAME_OVER or self.outcome is None:
            return None
        return {
            "outcome": self.outcome.value,
            "outcome_name": self.outcome.display_name,
            "description": self.outcome.description,
            "roles": {name: role.value for name, role in self._roles.items()},
            "eliminated": [
                {"name": p.name, "reason": p.elimination_reason.value if p.elimination_reason else None}
                for p in self.eliminated_players()
            ],
            "vote_tallies": dict(self._tallies),
            "chronicle": self.chronicle.to_dict(),
        }


__all__ = ["GameModel", "Listener"]

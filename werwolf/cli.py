"""狼人杀命令行入口：一台终端轮流传递的对局。"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Callable, List, Optional

from .config import GameConfig, InvalidConfigError
from .engine import GameModel
from .logger import setup_logger
from .models import GamePhase, Player, Role
from .phases import phase_info
from .voting import TiePolicy


class TerminalUI:
    def __init__(
        self,
        model: GameModel,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        clear: bool = True,
    ):
        self.model = model
        self.input = input_fn
        self.output = output
        self.clear = clear

    def clear_screen(self):
        if self.clear:
            os.system("cls" if os.name == "nt" else "clear")
        else:
            self.output("\n" * 3)

    def print_header(self, text: str):
        self.output("\n=== " + text + " ===")

    def pause(self, message: str = "Press Enter to continue..."):
        self.input(message)

    def select_player(self, message: str, eligible: List[Player]) -> str:
        self.output("\n" + message)
        for i, player in enumerate(eligible, 1):
            self.output(f"{i}. {player.name}")
        while True:
            choice = self.input("Enter your choice (number): ").strip()
            if choice.isdigit() and 1 <= int(choice) <= len(eligible):
                return eligible[int(choice) - 1].name
            self.output("Invalid choice. Please try again.")

    # ---------------------------------------------------------------- setup --
    def setup(self, names: List[str]) -> None:
        if names:
            result = self.model.add_players(names)
            if not result:
                self.output(f"Error: {result.message}")
        while True:
            if len(self.model.players) >= 3:
                result = self.model.start_game()
                if result:
                    return
                self.output(f"Cannot start: {result.message}")
            name = self.input("Enter a player name (blank to start): ").strip()
            if not name:
                if len(self.model.players) < 3:
                    self.output("At least 3 players are needed.")
                continue
            result = self.model.add_player(name)
            if not result:
                self.output(f"Error: {result.message}")

    # ------------------------------------------------------------ handoffs --
    def _handoff(self) -> Optional[Player]:
        instructions = self.model.current_device_passing_instructions()
        self.clear_screen()
        self.output(f"Pass the device to {instructions.who}.")
        self.pause(f"{instructions.who}, press Enter when you are holding the device...")
        self.output(instructions.what)
        return self.model.current_player

    def _finish_turn(self, instructions_when: str) -> None:
        self.pause(f"{instructions_when}. Press Enter to hide the screen...")
        self.clear_screen()
        self.model.advance_current_player()

    def _for_each_holder(self, turn: Callable[[Player], None]) -> None:
        for _ in range(len(self.model.alive_players())):
            when = self.model.current_device_passing_instructions().when
            holder = self._handoff()
            if holder is not None:
                turn(holder)
            self._finish_turn(when)

    # --------------------------------------------------------------- phases --
    def handle_role_reveal(self) -> None:
        self.print_header(phase_info(GamePhase.ROLE_REVEAL).display_name)

        def reveal(holder: Player) -> None:
            role = self.model.player_role(holder.name)
            self.output(f"\nYou are the {role.display_name}.")
            self.output(role.info.description)

        self._for_each_holder(reveal)
        self.model.advance_to_next_phase()

    def handle_night(self) -> None:
        self.print_header(f"Night {self.model.round_no}")
        order = ", ".join(role.display_name for role in self.model.night_wake_order())
        self.output(f"The village falls asleep... ({order} wake in that order)")
        self._for_each_holder(self._night_turn)
        self.model.advance_to_next_phase()

    def _night_turn(self, holder: Player) -> None:
        role = self.model.player_role(holder.name)
        alive = self.model.alive_players()
        if role is Role.WEREWOLF:
            mates = self.model.werewolf_teammates(holder.name)
            if mates:
                self.output(f"Your fellow werewolves: {', '.join(mates)}")
            record = self.model.record_werewolf_choice
            prompt = "Who should the werewolves eliminate?"
            eligible = [p for p in alive if p.name not in mates and p.name != holder.name]
        elif role is Role.SEER:
            record = self.model.record_seer_choice
            prompt = "Who do you want to investigate?"
            eligible = [p for p in alive if p.name != holder.name]
        elif role is Role.DOCTOR:
            record = self.model.record_doctor_choice
            prompt = "Who do you want to protect?"
            eligible = alive
        else:
            return
        while True:
            target = self.select_player(prompt, eligible)
            result = record(holder.name, target)
            if result:
                break
            self.output(f"Not allowed: {result.message}")
        if role is Role.SEER:
            self.output(self.model.seer_result(holder.name).message)

    def handle_day(self) -> None:
        self.print_header(f"Day {self.model.round_no}")
        report = self.model.night_report()
        if report and report["eliminated"]:
            self.output(f"{report['eliminated']} was killed during the night.")
        elif report and report["survived_attack"]:
            self.output("The werewolves attacked, but their victim survived!")
        else:
            self.output("Nobody died during the night.")
        self.output(phase_info(GamePhase.DAY_PHASE).instructions)
        self.pause("Press Enter when the discussion is over and voting should begin...")
        result = self.model.advance_to_next_phase()
        if not result:
            self.output(f"Cannot vote: {result.message}")

    def handle_voting(self) -> None:
        self.print_header(f"Voting - Day {self.model.round_no}")

        def vote(holder: Player) -> None:
            while True:
                target = self.select_player("Who do you vote to eliminate?", self.model.alive_players())
                result = self.model.record_vote(holder.name, target)
                if result:
                    return
                self.output(f"Not allowed: {result.message}")

        self._for_each_holder(vote)
        self.model.advance_to_next_phase()

    def handle_elimination(self) -> None:
        self.print_header(phase_info(GamePhase.ELIMINATION).display_name)
        tallies = self.model.voting_results() or {}
        for name, count in sorted(tallies.items(), key=lambda item: -item[1]):
            self.output(f"{name}: {count} vote(s)")
        eliminated = self.model.last_vote_eliminated
        if eliminated:
            self.output(f"\n{eliminated} was voted out.")
        else:
            self.output("\nNo one was voted out.")
        self.pause()
        self.model.advance_to_next_phase()

    def show_results(self) -> None:
        results = self.model.final_results()
        if results is None:
            return
        self.print_header(results["outcome_name"])
        self.output(results["description"])
        for name, role in results["roles"].items():
            marker = "" if self.model.is_player_alive(name) else " (eliminated)"
            self.output(f"{name}: {Role(role).display_name}{marker}")

    def run(self, names: List[str]) -> None:
        handlers = {
            GamePhase.ROLE_REVEAL: self.handle_role_reveal,
            GamePhase.NIGHT_PHASE: self.handle_night,
            GamePhase.DAY_PHASE: self.handle_day,
            GamePhase.VOTING: self.handle_voting,
            GamePhase.ELIMINATION: self.handle_elimination,
        }
        self.setup(names)
        while self.model.is_game_active:
            handlers[self.model.phase]()
        self.show_results()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pass-and-play Werewolf on one terminal")
    parser.add_argument("names", nargs="*", help="player names (3-12)")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible games")
    parser.add_argument(
        "--tie-policy",
        choices=[policy.value for policy in TiePolicy],
        default=None,
        help="what happens when the vote is tied",
    )
    parser.add_argument("--log-level", default=None, help="logging level, e.g. DEBUG")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    return parser


def build_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.load()
    if args.seed is not None:
        config.seed = args.seed
    if args.tie_policy is not None:
        config.tie_policy = TiePolicy(args.tie_policy)
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_file is not None:
        config.log_file = args.log_file
    return config


def run_cli(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = build_config(args)
    except InvalidConfigError as exc:
        parser.error(str(exc))
    logger = setup_logger(config)
    logger.debug("Starting Werwolf in the terminal")

    ui = TerminalUI(GameModel(config=config))
    try:
        ui.run(args.names)
    except (KeyboardInterrupt, EOFError):
        print("\nGame terminated by user")
        sys.exit(0)


__all__ = ["run_cli", "build_parser", "build_config", "TerminalUI"]

import random

import pytest

from werwolf.engine import GameModel
from werwolf.models import GamePhase, Role


SIX_PLAYERS = ["Alice", "Bob", "Carol", "David", "Eve", "Frank"]


@pytest.fixture
def model():
    return GameModel(rng=random.Random(7))


@pytest.fixture
def six_player_game(model):
    assert model.add_players(SIX_PLAYERS)
    assert model.start_game()
    return model


@pytest.fixture
def with_role():
    def lookup(model, role: Role):
        return [p.name for p in model.players if model.player_role(p.name) is role]

    return lookup


@pytest.fixture
def advance_to():
    def advance(model, phase: GamePhase, limit: int = 20):
        for _ in range(limit):
            if model.phase is phase:
                return
            assert model.advance_to_next_phase(), f"stuck in {model.phase}"
        pytest.fail(f"never reached {phase}")

    return advance

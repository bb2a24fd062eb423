import logging

import pytest

from werwolf.config import GameConfig, InvalidConfigError, parse_seed, parse_tie_policy
from werwolf.logger import setup_logger
from werwolf.voting import TiePolicy


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("WERWOLF_SEED", "WERWOLF_PORT", "WERWOLF_TIE_POLICY", "WERWOLF_HOST", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = GameConfig.load()
    assert config.tie_policy is TiePolicy.RANDOM
    assert config.seed is None
    assert config.port == 3001
    assert config.log_file is None


def test_environment_overrides(clean_env):
    clean_env.setenv("WERWOLF_SEED", "9")
    clean_env.setenv("WERWOLF_TIE_POLICY", "no_elimination")
    clean_env.setenv("WERWOLF_PORT", "8080")
    config = GameConfig.load()
    assert config.seed == 9
    assert config.tie_policy is TiePolicy.NO_ELIMINATION
    assert config.port == 8080


@pytest.mark.parametrize(
    "name, value",
    [("WERWOLF_PORT", "eighty"), ("WERWOLF_SEED", "abc"), ("WERWOLF_TIE_POLICY", "coin_flip")],
)
def test_bad_environment_names_the_variable(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(InvalidConfigError) as excinfo:
        GameConfig.load()
    if name != "WERWOLF_TIE_POLICY":
        assert name in str(excinfo.value)


@pytest.mark.parametrize("value", [[1, 2], "42", 4.0, True])
def test_parse_seed_rejects_non_integers(value):
    with pytest.raises(InvalidConfigError):
        parse_seed(value)


def test_parse_seed_accepts_integers_and_none():
    assert parse_seed(7) == 7
    assert parse_seed(None) is None


def test_parse_tie_policy():
    assert parse_tie_policy("random") is TiePolicy.RANDOM
    with pytest.raises(InvalidConfigError):
        parse_tie_policy("coin_flip")


def test_setup_logger_uses_the_package_logger():
    logger = setup_logger(GameConfig(log_level="warning"))
    assert logger.name == "werwolf"
    assert logger.level == logging.WARNING
    assert logger.handlers

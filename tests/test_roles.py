import random
from collections import Counter

import pytest

from werwolf.models import Role, Team
from werwolf.roles import (
    DEFAULT_DISTRIBUTIONS,
    InvalidDistributionError,
    InvalidPlayerCountError,
    RoleDistribution,
    assign,
    evaluate_balance,
    role_distribution,
    validate_distribution,
)


@pytest.mark.parametrize("count", range(3, 13))
def test_assignment_matches_distribution_table(count):
    names = [f"P{i}" for i in range(count)]
    roles = assign(names, rng=random.Random(count))
    expected = role_distribution(count)

    assert list(roles.keys()) == names
    counts = Counter(roles.values())
    for role in Role:
        assert counts.get(role, 0) == expected.count(role)
    assert sum(counts.values()) == count
    assert expected.werewolves < expected.villager_team


@pytest.mark.parametrize("count", range(3, 13))
def test_default_table_is_balanced(count):
    distribution = DEFAULT_DISTRIBUTIONS[count]
    assert distribution.total == count
    assert 0.2 <= distribution.werewolves / count <= 0.4
    validate_distribution(distribution)


@pytest.mark.parametrize("count", [0, 2, 13])
def test_invalid_player_count_is_rejected(count):
    with pytest.raises(InvalidPlayerCountError):
        assign([f"P{i}" for i in range(count)])


def test_custom_distribution_must_cover_every_player():
    with pytest.raises(InvalidPlayerCountError):
        assign(["A", "B", "C", "D"], RoleDistribution(werewolves=1, seer=1, doctor=0, villagers=1))


def test_custom_distribution_is_used():
    roles = assign(
        ["A", "B", "C", "D", "E", "F"],
        RoleDistribution(werewolves=1, seer=1, doctor=0, villagers=4),
        rng=random.Random(1),
    )
    counts = Counter(roles.values())
    assert counts[Role.WEREWOLF] == 1
    assert counts[Role.VILLAGER] == 4
    assert Role.DOCTOR not in counts


def test_assignment_is_shuffled():
    names = ["Alice", "Bob", "Carol", "David", "Eve", "Frank"]
    seen = {tuple(assign(names, rng=random.Random(seed)).values()) for seed in range(20)}
    assert len(seen) > 1


@pytest.mark.parametrize(
    "distribution, balanced, description",
    [
        (RoleDistribution(0, 1, 1, 2), False, "No werewolves"),
        (RoleDistribution(1, 0, 0, 0), False, "No villagers"),
        (RoleDistribution(2, 1, 0, 1), False, "Too many werewolves"),
        (RoleDistribution(1, 1, 1, 6), True, "Villager-favored"),
        (RoleDistribution(4, 1, 1, 3), True, "Werewolf-favored"),
        (RoleDistribution(2, 1, 1, 2), True, "Well balanced"),
    ],
)
def test_balance_report(distribution, balanced, description):
    report = evaluate_balance(distribution)
    assert report.is_balanced is balanced
    assert report.description.startswith(description)


def test_validate_distribution_rejects_extra_special_roles():
    with pytest.raises(InvalidDistributionError):
        validate_distribution(RoleDistribution(werewolves=1, seer=2, doctor=0, villagers=2))


def test_distribution_from_dict_rejects_garbage():
    with pytest.raises(InvalidDistributionError):
        RoleDistribution.from_dict({"werewolves": "many"})


def test_role_catalog():
    assert Role.WEREWOLF.team is Team.WEREWOLF
    assert all(role.team is Team.VILLAGER for role in (Role.SEER, Role.DOCTOR, Role.VILLAGER))
    assert [Role.SEER.night_action_priority, Role.WEREWOLF.night_action_priority, Role.DOCTOR.night_action_priority] == [1, 2, 3]
    assert Role.VILLAGER.night_action_priority is None
    assert not Role.VILLAGER.has_night_action

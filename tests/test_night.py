from werwolf.models import Role
from werwolf.night import NightSubmissions, can_protect, investigate, night_wake_order, resolve


ROLE_MAP = {
    "Alice": Role.WEREWOLF,
    "Bob": Role.SEER,
    "Carol": Role.DOCTOR,
    "David": Role.VILLAGER,
}


def test_protected_target_survives():
    result = resolve(ROLE_MAP, werewolf_target="David", doctor_target="David")
    assert result.survived_attack
    assert result.eliminated_player is None
    assert not result.has_elimination


def test_unprotected_target_is_eliminated():
    result = resolve(ROLE_MAP, werewolf_target="David", doctor_target="Bob")
    assert result.eliminated_player == "David"
    assert not result.survived_attack


def test_quiet_night():
    result = resolve(ROLE_MAP, doctor_target="Bob")
    assert result.eliminated_player is None
    assert not result.survived_attack
    assert result.seer_result is None


def test_seer_result_reports_team():
    result = resolve(ROLE_MAP, seer_target="Alice", werewolf_target="David")
    assert result.seer_result.target == "Alice"
    assert result.seer_result.is_werewolf
    assert result.seer_result.message == "Alice is a Werewolf!"
    assert investigate("Carol", ROLE_MAP).message == "Carol is not a Werewolf."


def test_doctor_cannot_repeat_protection():
    assert can_protect("Bob", None)
    assert can_protect("Bob", "Carol")
    assert not can_protect("Bob", "Bob")


def test_wake_order_follows_priority():
    assert night_wake_order(ROLE_MAP.values()) == [Role.SEER, Role.WEREWOLF, Role.DOCTOR]
    assert night_wake_order([Role.VILLAGER, Role.WEREWOLF, Role.WEREWOLF]) == [Role.WEREWOLF]


def test_submissions_reset_between_nights():
    submissions = NightSubmissions(werewolf_target="David", doctor_target="Bob")
    assert submissions.submitted_roles() == [Role.WEREWOLF, Role.DOCTOR]
    submissions.clear()
    assert submissions.submitted_roles() == []

"""夜晚行动的提交状态与结算。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from .models import NightResult, Role, SeerResult


@dataclass(slots=True)
class NightSubmissions:
    """单夜提交的目标，每晚开始时清空。"""

    werewolf_target: Optional[str] = None
    seer_target: Optional[str] = None
    doctor_target: Optional[str] = None

    def clear(self) -> None:
        self.werewolf_target = None
        self.seer_target = None
        self.doctor_target = None

    def submitted_roles(self) -> List[Role]:
        roles = []
        if self.seer_target is not None:
            roles.append(Role.SEER)
        if self.werewolf_target is not None:
            roles.append(Role.WEREWOLF)
        if self.doctor_target is not None:
            roles.append(Role.DOCTOR)
        return roles


def investigate(target: str, role_map: Mapping[str, Role]) -> SeerResult:
    return SeerResult(target=target, is_werewolf=role_map.get(target) is Role.WEREWOLF)


def can_protect(target: str, previous_doctor_target: Optional[str]) -> bool:
    """医生不能连续两晚守护同一人。"""
    return target != previous_doctor_target


def night_wake_order(roles: Iterable[Role]) -> List[Role]:
    acting = {role for role in roles if role.has_night_action}
    return sorted(acting, key=lambda role: role.night_action_priority)


def resolve(
    role_map: Mapping[str, Role],
    seer_target: Optional[str] = None,
    werewolf_target: Optional[str] = None,
    doctor_target: Optional[str] = None,
) -> NightResult:
    """一次性结算整晚的提交；优先级只影响叙事顺序，不存在夜内互相响应。"""
    result = NightResult()
    if seer_target is not None:
        result.seer_result = investigate(seer_target, role_map)
    if werewolf_target is None:
        return result
    if werewolf_target == doctor_target:
        result.survived_attack = True
    else:
        result.eliminated_player = werewolf_target
    return result

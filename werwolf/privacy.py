"""共享设备上的信息可见性规则。"""

from __future__ import annotations

from typing import List, Mapping

from .models import GamePhase, Player, Role, VisiblePlayerInfo


def can_view_role(
    subject_name: str,
    viewer_name: str,
    phase: GamePhase,
    role_map: Mapping[str, Role],
) -> bool:
    if subject_name == viewer_name:
        return True
    if phase is GamePhase.GAME_OVER:
        return True
    if phase is GamePhase.NIGHT_PHASE:
        viewer_role = role_map.get(viewer_name)
        subject_role = role_map.get(subject_name)
        return viewer_role is Role.WEREWOLF and subject_role is Role.WEREWOLF
    return False


def visible_info(
    subject: Player,
    viewer_name: str,
    phase: GamePhase,
    role_map: Mapping[str, Role],
) -> VisiblePlayerInfo:
    """纯函数：存活状态总是可见，身份按规则遮蔽。"""
    role = role_map.get(subject.name) if can_view_role(subject.name, viewer_name, phase, role_map) else None
    return VisiblePlayerInfo(name=subject.name, is_alive=subject.is_alive, role=role)


def werewolf_teammates(
    viewer_name: str,
    phase: GamePhase,
    role_map: Mapping[str, Role],
) -> List[str]:
    if phase is not GamePhase.NIGHT_PHASE or role_map.get(viewer_name) is not Role.WEREWOLF:
        return []
    return [name for name, role in role_map.items() if role is Role.WEREWOLF and name != viewer_name]

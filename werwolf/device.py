"""传递设备时给当前持有者的提示（谁、做什么、何时交出）。"""

from __future__ import annotations

from typing import Optional

from .models import DevicePassingInstructions, GamePhase, Role
from .phases import requires_private_device_pass


GROUP_INSTRUCTIONS = DevicePassingInstructions(
    who="Everyone",
    what="Group phase - device stays in center",
    when="Continue when ready",
)

IDLE_INSTRUCTIONS = DevicePassingInstructions(
    who="Everyone",
    what="Prepare for next phase",
    when="When ready, continue to next phase",
)


class DevicePassingCoordinator:
    """根据阶段和当前玩家生成说明文本，本身不持有状态。"""

    def instructions(
        self,
        phase: GamePhase,
        current_player: Optional[str],
        role: Optional[Role] = None,
    ) -> DevicePassingInstructions:
        if not requires_private_device_pass(phase):
            return GROUP_INSTRUCTIONS
        if current_player is None:
            return IDLE_INSTRUCTIONS
        if phase is GamePhase.ROLE_REVEAL:
            return DevicePassingInstructions(
                who=current_player,
                what="Look at your secret role. Read it carefully and understand your abilities.",
                when="After viewing your role, pass the device to the next player",
            )
        if phase is GamePhase.NIGHT_PHASE:
            if role is not None and role.has_night_action:
                return DevicePassingInstructions(
                    who=current_player,
                    what=role.info.night_instructions,
                    when="After making your choice, pass the device to the next player",
                )
            return DevicePassingInstructions(
                who=current_player,
                what="You have no night action. Simply confirm and pass the device.",
                when="Immediately pass to the next player",
            )
        return DevicePassingInstructions(
            who=current_player,
            what="Cast your vote privately. Choose who to eliminate.",
            when="After voting, pass the device to the next player",
        )

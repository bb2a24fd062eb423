"""运行配置：默认值可被环境变量覆盖，前端再按命令行或请求参数覆盖。"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .roles import RoleDistribution
from .voting import TiePolicy


class InvalidConfigError(ValueError):
    pass


def parse_seed(value: object) -> Optional[int]:
    """种子只接受整数或 None；bool 虽是 int 子类，也拒绝。"""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigError(f"seed must be an integer, got {value!r}")
    return value


def parse_tie_policy(value: object) -> TiePolicy:
    try:
        return TiePolicy(value)
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in TiePolicy)
        raise InvalidConfigError(f"Unknown tie policy {value!r} (expected one of: {choices})") from exc


@dataclass
class GameConfig:
    tie_policy: TiePolicy = TiePolicy.RANDOM
    seed: Optional[int] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 3001
    role_distribution: Optional[RoleDistribution] = None

    @classmethod
    def load(cls) -> "GameConfig":
        """从 WERWOLF_* / LOG_* 环境变量读取；格式错误抛 InvalidConfigError。"""
        seed = os.getenv("WERWOLF_SEED")
        port = os.getenv("WERWOLF_PORT", "3001")
        try:
            parsed_seed = int(seed) if seed else None
        except ValueError as exc:
            raise InvalidConfigError(f"WERWOLF_SEED must be an integer, got {seed!r}") from exc
        try:
            parsed_port = int(port)
        except ValueError as exc:
            raise InvalidConfigError(f"WERWOLF_PORT must be an integer, got {port!r}") from exc
        return cls(
            tie_policy=parse_tie_policy(os.getenv("WERWOLF_TIE_POLICY", TiePolicy.RANDOM.value)),
            seed=parsed_seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            host=os.getenv("WERWOLF_HOST", "127.0.0.1"),
            port=parsed_port,
        )

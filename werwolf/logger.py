"""日志初始化：引擎各模块都写到名为 werwolf 的 logger。"""

from __future__ import annotations

import logging

from .config import GameConfig


LOGGER_NAME = "werwolf"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(config: GameConfig) -> logging.Logger:
    """按配置挂上控制台与可选的文件 handler；重复调用只更新级别。"""
    level = config.log_level.upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if config.log_file else level)
    if logger.handlers:
        return logger

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    # 文件 handler 始终记 DEBUG
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger

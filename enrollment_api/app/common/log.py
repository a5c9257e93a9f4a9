"""日志系统模块

日志在创建应用时按配置安装，控制台输出必有，文件输出按需添加。
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING
from loguru import logger

if TYPE_CHECKING:
    from enrollment_api.app.core.config import Settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(settings: "Settings") -> None:
    """按配置重建日志输出，重复调用时先清理已有的输出"""
    logger.remove()

    level = settings.log_level.upper()
    logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT, colorize=True)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level=level,
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
            encoding="utf-8"
        )


__all__ = ["logger", "setup_logging"]

"""
日志配置
基于 loguru 的控制台与可选文件日志
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def init_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """配置 loguru: stderr 输出，可选滚动日志文件"""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), colorize=True)

    if log_file:
        target = Path(log_file).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.add(target, level=level.upper(), rotation="10 MB", retention="7 days")

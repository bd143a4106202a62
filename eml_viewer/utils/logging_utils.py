# eml_viewer/utils/logging_utils.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_LOGGER_CONFIGURED = False

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(log_dir: Optional[str] = "logs", level: str = "INFO") -> None:
    """
    Point loguru at stderr and, when log_dir is given, a rotating file
    eml_viewer.log inside it. Only the first call has any effect.
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED:
        return

    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "eml_viewer.log",
            rotation="10 MB",
            retention="14 days",
            level=level,
            backtrace=False,
            diagnose=False,
            enqueue=True,
            encoding="utf-8",
        )

    _LOGGER_CONFIGURED = True


def get_logger():
    """
    Shared loguru logger. Until configure_logging() runs, messages go to
    loguru's default stderr sink.
    """
    return logger

"""
Loguru sink configuration for command-line use.

Library code only calls ``logger``; sinks are installed by entry points.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from practice_engine.config import get_settings


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Replace the default sink with a stderr sink and an optional rotating file."""
    settings = get_settings()
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{message}</level>",
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        )

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "WINTWEAKS_LOG_DIR",
        Path.home() / ".local" / "state" / "wintweaks" / "logs",
    )
)

LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def setup_logging(
    level: str = "INFO",
    *,
    log_dir: Path | None = None,
    file_logging: bool = True,
    console: bool = True,
) -> Logger:
    """
    Configure loguru sinks for a run.

    Sinks:
    - stderr: diagnostics at `level`
    - operations.log: INFO+ record of every outcome (7 day retention)

    Per-entry lines for the user are printed by the console UI, not here.
    """
    level = level.upper()
    logger.remove()
    logger.configure(extra={"source": "engine"})

    if console:
        logger.add(
            sys.stderr,
            level=level,
            backtrace=False,
            diagnose=False,
            colorize=True,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[source]: <13}</cyan> | "
                "{message}"
            ),
        )

    if file_logging:
        log_dir = log_dir or DEFAULT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "operations.log",
            level="INFO" if level not in ("TRACE", "DEBUG") else level,
            rotation="5 MB",
            retention="7 days",
            backtrace=False,
            diagnose=False,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <13} | "
                "{message}"
            ),
        )

    return logger


def get_logger(source: str) -> Logger:
    """Logger bound to a component name."""
    return logger.bind(source=source)

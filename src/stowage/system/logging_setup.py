# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/system/logging_setup.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from stowage.config.manager import load_config
from stowage.system.exceptions import ConfigError


def setup_logging(debug: bool = False, local_log: Optional[Path] = None) -> None:
    """Setup loguru logging for the entire application.

    Configures:
    - Console output: WARNING+ only (DEBUG+ with debug=True)
    - File output: DEBUG+ if local_log is given or configured in stowage.yml
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format="<level>{level}</level>: {message}",
        colorize=True
    )

    if local_log is None:
        try:
            local_log = load_config().local_log
        except ConfigError as e:
            logger.warning(f"Failed to read logging config: {e}")
            return

    if local_log:
        log_dir = Path(local_log)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "stowage.log"

        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="10 MB",
            retention="30 days",
            compression="gz"
        )
        logger.debug(f"File logging enabled: {log_file}")

"""
Logging Setup
Configures the root logger from SystemConfig
"""

import logging
import sys
from pathlib import Path
from typing import List

from .config import SystemConfig
from .structured_logging import JSONFormatter


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(system_config: SystemConfig) -> None:
    """
    Setup logging configuration

    Logs go to stdout, and additionally to LOG_FILE when one is configured.
    An unknown LOG_LEVEL falls back to INFO with a warning.
    """
    level_name = str(system_config.log_level).upper()
    level = logging.getLevelName(level_name)
    level_valid = isinstance(level, int)
    if not level_valid:
        level = logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if system_config.log_file:
        log_path = Path(system_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    if system_config.log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    if not level_valid:
        logging.getLogger(__name__).warning(
            "Invalid log level '%s'; defaulting to INFO",
            system_config.log_level
        )

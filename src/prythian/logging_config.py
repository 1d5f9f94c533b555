import logging
import os
from typing import Optional

LEVEL_ENV_VAR = "PRYTHIAN_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def _resolve_level(name: Optional[str], default_level: int) -> int:
    if not name:
        return default_level
    level = logging.getLevelName(name.strip().upper())
    # getLevelName returns "Level X" strings for names it does not know.
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO) -> int:
    """Configure the root logger for a host application or test run.

    The PRYTHIAN_LOG_LEVEL environment variable (e.g. "DEBUG") overrides
    default_level. Combat rolls log at DEBUG; encounter outcomes at INFO.

    Returns:
        The level applied to the root logger.
    """
    level = _resolve_level(os.getenv(LEVEL_ENV_VAR), default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist; the level still applies.
    logging.getLogger().setLevel(level)
    return level

"""
Logging configuration for the loader scripts and the scheduler
"""

import logging
import sys
from typing import Optional
from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Statement echo and job chatter drown the per-table load messages
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "apscheduler")


def setup_logging(level: Optional[str] = None) -> int:
    """
    Configure the root logger once per process.
    
    Args:
        level: Level name overriding settings.LOG_LEVEL
    
    Returns:
        The numeric level applied
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True
    )
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    
    logging.getLogger(__name__).info(f"Logging configured at {logging.getLevelName(log_level)} level")
    return log_level

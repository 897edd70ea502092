"""
logging.py — Package-Wide Logging Configuration

Purpose:
- Give cache loads, registry pruning and rejected mutations one readable format.
- Keep SQLAlchemy's engine logger quiet unless DEBUG is requested, since every
  reference table load would otherwise echo its SELECT.

Format: timestamp | level | module | message
"""

import logging
from typing import Optional

from refdata.core.config import settings

# -----------------------------------------------------------------------------
# Log Format
# -----------------------------------------------------------------------------

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)

# -----------------------------------------------------------------------------
# Root Logger Initialization
# -----------------------------------------------------------------------------

def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging settings.

    Parameters:
        level (str): "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL".
            Defaults to REFDATA_LOG_LEVEL.

    Should be called ONCE, typically in `main.py` at app startup.
    """
    level = (level or settings.REFDATA_LOG_LEVEL).upper()
    numeric_level = getattr(logging, level, logging.INFO)

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)

    if numeric_level > logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized with level %s", level)

# -----------------------------------------------------------------------------
# Logger Access Helper
# -----------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    """
    Return a logger instance to be used in any module:

        from refdata.core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)

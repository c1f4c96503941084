"""Process-wide logging setup for KIPRIS Insight."""

import logging
from typing import Optional

from kipris_insight.core.config import get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Transport libraries log every request at DEBUG/INFO
NOISY_LOGGERS = ("httpcore", "httpx")


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for the service.

    Args:
        level: Log level name. If omitted, `LOG_LEVEL` from config is used.
    """
    level_name = (level or get_config().log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        force=True,
        handlers=[logging.StreamHandler()],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

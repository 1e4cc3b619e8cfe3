"""Logging configuration."""

import logging
import sys
from typing import Optional

from wealthtrack.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty at INFO: SQL echo, yfinance's peewee cache, HTTP connection pools
_NOISY_LOGGERS = ("sqlalchemy.engine", "yfinance", "peewee", "urllib3")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging; `level` overrides settings.log_level."""
    level_name = (level or get_settings().log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("wealthtrack").setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

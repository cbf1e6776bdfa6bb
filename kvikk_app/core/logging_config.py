# kvikk_app/core/logging_config.py
"""
Logging setup for the Kvikk app.

Rate quotes, webhook deliveries and shipment creation log through the
`kvikk_app.*` loggers at LOG_LEVEL. The HTTP client and database drivers log
every request and query at INFO, so they are held at WARNING.
"""

import logging
from typing import Optional

from kvikk_app.core.config import get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "sqlalchemy",
    "sqlalchemy.engine",
    "asyncpg",
    "aiosqlite",
    "uvicorn.access",
)


def configure_logging(log_level: Optional[str] = None):
    """Configure root logging once at startup; LOG_LEVEL from settings unless given."""
    log_level = (log_level or get_settings().LOG_LEVEL).upper()
    level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("kvikk_app").setLevel(level)

    logging.getLogger(__name__).info(f"Logging configured at level: {log_level}")

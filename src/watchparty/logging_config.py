"""Logging setup for the watch party server."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Filter to suppress health check polling in the uvicorn access log
class HealthCheckFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if '"GET /api/health' in message and "200" in message:
            return False
        return True


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure root logging once and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())
    return logging.getLogger("watchparty")

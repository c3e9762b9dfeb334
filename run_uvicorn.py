#!/usr/bin/env python3
"""
Uvicorn runner script for the watch party server.
Starts the Socket.IO-wrapped FastAPI application.
"""

import uvicorn

from watchparty.config.settings import get_settings
from watchparty.logging_config import setup_logging


def main():
    """Start the Socket.IO-wrapped FastAPI application with uvicorn."""
    settings = get_settings()
    logger = setup_logging(settings.log_level)
    logger.info("Starting server on %s:%s", settings.host, settings.port)

    uvicorn.run(
        "watchparty.api.app:create_socket_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

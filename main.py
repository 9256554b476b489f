"""
GeoMind - Main Entry Point

Street-food map explorer with a location-aware AI assistant.
"""

import logging
import sys

import structlog
import uvicorn

from geomind.config import get_settings


def configure_logging(level: str) -> None:
    """Route structlog through stdlib logging with JSON output."""
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main():
    """Main entry point for running the application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Starting server",
        host=settings.api_host,
        port=settings.api_port,
        environment=settings.app_env,
    )

    uvicorn.run(
        "geomind.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

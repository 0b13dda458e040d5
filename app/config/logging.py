"""
Logging configuration.

Configures loguru sinks for the API server and background jobs.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(component: str) -> None:
    """
    Configure logger with stderr output and file rotation.

    Args:
        component: Process name written into every record ("api", "jobs", ...)
    """
    logger.remove()
    logger.configure(extra={"component": component})
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        ),
    )
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
        enqueue=True,
    )

    logger.info(f"Starting commission engine ({component})...")

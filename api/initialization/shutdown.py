"""
API Initialization - Shutdown Module.

Closes database connections when the application stops.
"""

from aiohttp import web
from loguru import logger


async def shutdown_handler(app: web.Application) -> None:
    """Handle graceful shutdown."""
    logger.info("Graceful shutdown initiated...")

    try:
        from app.config.database import engine
        await engine.dispose()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database: {e}")

    logger.info("Graceful shutdown complete")

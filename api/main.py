"""
API main entry point.

Builds and runs the aiohttp application that exposes payment intake
and the commission batch triggers.
"""

import sys
from pathlib import Path

from aiohttp import web
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.app_keys import SERVICE_API_KEY, SESSION_MAKER  # noqa: E402
from api.initialization.middlewares import register_middlewares  # noqa: E402
from api.initialization.routes import register_routes  # noqa: E402
from api.initialization.shutdown import shutdown_handler  # noqa: E402
from app.config.settings import settings  # noqa: E402


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    api_key: str | None = None,
) -> web.Application:
    """
    Create the HTTP application.

    Args:
        session_maker: Session factory (defaults to the global one)
        api_key: Bearer token to require (None disables auth)

    Returns:
        Configured application
    """
    app = web.Application()

    if session_maker is None:
        from app.config.database import async_session_maker
        session_maker = async_session_maker
        app.on_cleanup.append(shutdown_handler)

    app[SESSION_MAKER] = session_maker
    if api_key:
        app[SERVICE_API_KEY] = api_key

    register_middlewares(app)
    register_routes(app)

    return app


def main() -> None:
    """Initialize and run the API server."""
    from app.config.logging import setup_logging

    setup_logging("api")

    app = create_app(api_key=settings.service_api_key)

    logger.info(f"API listening on {settings.api_host}:{settings.api_port}")
    web.run_app(
        app,
        host=settings.api_host,
        port=settings.api_port,
        print=None,
        access_log=None,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("API stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"API crashed: {e}")
        sys.exit(1)

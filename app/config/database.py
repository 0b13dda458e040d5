"""
Database configuration.

Async SQLAlchemy engine and session factory shared by the API and jobs.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import settings


def create_engine(
    database_url: str | None = None, null_pool: bool = False
) -> AsyncEngine:
    """
    Create async engine.

    Args:
        database_url: Override for settings.database_url
        null_pool: Disable pooling (for short-lived job processes)

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.database_url
    kwargs: dict = {"echo": settings.database_echo}

    if url.startswith("postgresql+asyncpg://"):
        # Store calls must surface as errors instead of hanging
        kwargs["connect_args"] = {
            "timeout": settings.store_timeout_seconds,
            "command_timeout": settings.store_timeout_seconds,
        }
        kwargs["pool_pre_ping"] = True

    if null_pool:
        kwargs["poolclass"] = NullPool

    return create_async_engine(url, **kwargs)


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine()
async_session_maker = create_session_maker(engine)

#!/usr/bin/env python3
"""Initialize commission engine tables and default settings."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402

from app.config.business_constants import (  # noqa: E402
    DEFAULT_CHECK_SCHEDULE,
    DEFAULT_HOLDING_PERIOD_DAYS,
    DEFAULT_MINIMUM_WITHDRAWAL,
    SETTING_CHECK_SCHEDULE,
    SETTING_DAYS_TO_AVAILABLE,
    SETTING_MIN_WITHDRAWAL,
)
from app.config.database import create_engine, create_session_maker  # noqa: E402
from app.models import Base  # noqa: E402
from app.repositories.app_setting_repository import AppSettingRepository  # noqa: E402


# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")

DEFAULT_SETTINGS = {
    SETTING_DAYS_TO_AVAILABLE: str(DEFAULT_HOLDING_PERIOD_DAYS),
    SETTING_MIN_WITHDRAWAL: str(DEFAULT_MINIMUM_WITHDRAWAL),
    SETTING_CHECK_SCHEDULE: DEFAULT_CHECK_SCHEDULE,
}


async def init_database() -> None:
    """Create all tables and seed missing commission settings."""
    logger.info("Connecting to database...")
    engine = create_engine(null_pool=True)

    try:
        async with engine.begin() as conn:
            logger.info("Creating tables (checkfirst=True)...")
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

        async with create_session_maker(engine)() as session:
            repo = AppSettingRepository(session)
            current = await repo.get_values(list(DEFAULT_SETTINGS))
            for key, value in DEFAULT_SETTINGS.items():
                if key not in current:
                    await repo.set_value(key, value)
                    logger.info(f"Seeded {key}={value}")
            await session.commit()
    finally:
        await engine.dispose()

    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())

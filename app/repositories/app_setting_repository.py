"""
AppSetting repository.

Data access layer for global key/value settings.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app_setting import AppSetting
from app.repositories.base import BaseRepository


class AppSettingRepository(BaseRepository[AppSetting]):
    """AppSetting repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize app setting repository."""
        super().__init__(AppSetting, session)

    async def get_values(self, keys: list[str]) -> dict[str, str | None]:
        """
        Get several settings in one query.

        Args:
            keys: Setting keys

        Returns:
            Mapping key -> value for keys that exist
        """
        stmt = select(AppSetting.key, AppSetting.value).where(
            AppSetting.key.in_(keys)
        )
        result = await self.session.execute(stmt)
        return {row.key: row.value for row in result.all()}

    async def set_value(self, key: str, value: str) -> AppSetting:
        """Create or overwrite a setting."""
        return await self.upsert(["key"], update_exclude=(), key=key, value=value)

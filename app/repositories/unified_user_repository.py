"""
UnifiedUser repository.

Data access layer for UnifiedUser model.
"""

from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.unified_user import UnifiedUser
from app.repositories.base import BaseRepository
from app.utils.datetime_utils import utc_now


class UnifiedUserRepository(BaseRepository[UnifiedUser]):
    """UnifiedUser repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize unified user repository."""
        super().__init__(UnifiedUser, session)

    async def get_by_external_id(
        self, external_user_id: str, product_id: str
    ) -> UnifiedUser | None:
        """
        Get user by external identity.

        Args:
            external_user_id: User id inside the external product
            product_id: Product id

        Returns:
            UnifiedUser or None
        """
        return await self.get_by(
            external_user_id=external_user_id, product_id=product_id
        )

    async def upsert_user(self, **data: Any) -> UnifiedUser:
        """
        Create or refresh user keyed on (external_user_id, product_id).

        Args:
            **data: UnifiedUser fields

        Returns:
            Stored user
        """
        return await self.upsert(
            ["external_user_id", "product_id"], **data
        )

    async def update_subscription(
        self, external_user_id: str, product_id: str, **fields: Any
    ) -> UnifiedUser | None:
        """
        Update subscription-tracking fields only.

        Args:
            external_user_id: User id inside the external product
            product_id: Product id
            **fields: Subscription fields to overwrite

        Returns:
            Updated user or None if the user was never synced
        """
        stmt = (
            update(UnifiedUser)
            .where(
                UnifiedUser.external_user_id == external_user_id,
                UnifiedUser.product_id == product_id,
            )
            .values(updated_at=utc_now(), **fields)
            .returning(UnifiedUser)
        )
        result = await self.session.execute(
            stmt, execution_options={"populate_existing": True}
        )
        return result.scalar_one_or_none()

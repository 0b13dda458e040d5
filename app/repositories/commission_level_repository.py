"""
ProductCommissionLevel repository.

Data access layer for the commission rate table.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PlanType
from app.models.product_commission_level import ProductCommissionLevel
from app.repositories.base import BaseRepository


class CommissionLevelRepository(BaseRepository[ProductCommissionLevel]):
    """Commission rate repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission level repository."""
        super().__init__(ProductCommissionLevel, session)

    async def get_active_percentage(
        self, product_id: str, plan_type: PlanType, level: int
    ) -> Decimal | None:
        """
        Get active commission percentage.

        Args:
            product_id: Product ID
            plan_type: Affiliate plan type
            level: Hierarchy level

        Returns:
            Percentage (0-100) or None when no active row exists
        """
        stmt = select(ProductCommissionLevel.percentage).where(
            ProductCommissionLevel.product_id == product_id,
            ProductCommissionLevel.plan_type == plan_type,
            ProductCommissionLevel.level == level,
            ProductCommissionLevel.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

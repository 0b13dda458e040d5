"""
Commission rate table.

Resolves an affiliate's plan type and the commission percentage for a
(product, plan type, level) triple.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PlanType
from app.repositories.commission_level_repository import (
    CommissionLevelRepository,
)
from app.repositories.subscription_repository import SubscriptionRepository
from app.utils.db_decorators import lookup_guard


class CommissionRateTable:
    """
    Rate lookups backed by product_commission_levels.

    Plan type is recomputed on every call: an affiliate can upgrade or
    downgrade between two invoices.
    """

    def __init__(self, session: AsyncSession, timeout: float) -> None:
        """
        Initialize rate table.

        Args:
            session: Async database session
            timeout: Per-lookup timeout in seconds
        """
        self.session = session
        self.timeout = timeout
        self.level_repo = CommissionLevelRepository(session)
        self.subscription_repo = SubscriptionRepository(session)

    @lookup_guard
    async def get_plan_type(self, affiliate_id: str) -> PlanType:
        """
        Classify affiliate as PRO or FREE.

        PRO if they hold any active or trialing subscription to a non-free
        plan; FREE otherwise, including when they have no subscription.

        Args:
            affiliate_id: Affiliate ID

        Returns:
            PlanType
        """
        if await self.subscription_repo.has_active_paid_plan(affiliate_id):
            return PlanType.PRO
        return PlanType.FREE

    @lookup_guard
    async def get_rate(
        self, product_id: str, plan_type: PlanType, level: int
    ) -> Decimal | None:
        """
        Get commission percentage.

        Args:
            product_id: Product ID
            plan_type: Affiliate plan type
            level: Hierarchy level

        Returns:
            Percentage, or None when no active rate exists (no commission
            at this level; not an error)
        """
        percentage = await self.level_repo.get_active_percentage(
            product_id, plan_type, level
        )

        if percentage is None or percentage <= 0:
            logger.debug(
                "No active commission rate",
                extra={
                    "product_id": product_id,
                    "plan_type": plan_type.value,
                    "level": level,
                },
            )
            return None

        return Decimal(percentage)

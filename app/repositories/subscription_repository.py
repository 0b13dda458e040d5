"""
Subscription repository.

Read access to affiliates' own subscriptions.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import ACTIVE_SUBSCRIPTION_STATUSES
from app.models.plan import Plan, Subscription
from app.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Subscription repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize subscription repository."""
        super().__init__(Subscription, session)

    async def has_active_paid_plan(self, user_id: str) -> bool:
        """
        Check if user holds an active or trialing subscription to a paid plan.

        Args:
            user_id: Affiliate ID

        Returns:
            True if any such subscription exists
        """
        stmt = (
            select(Subscription.id)
            .join(Plan, Plan.id == Subscription.plan_id)
            .where(
                Subscription.user_id == user_id,
                Subscription.status.in_(ACTIVE_SUBSCRIPTION_STATUSES),
                Plan.is_free.is_(False),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

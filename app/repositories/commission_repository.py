"""
Commission repository.

Data access layer for Commission model.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.commission import Commission
from app.models.enums import CommissionStatus
from app.repositories.base import BaseRepository


# Idempotency key enforced by uq_commissions_payment_affiliate_level
IDEMPOTENCY_KEY = ["unified_payment_id", "affiliate_id", "level"]


class CommissionRepository(BaseRepository[Commission]):
    """Commission repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(Commission, session)

    async def get_for_payment(self, payment_id: int) -> list[Commission]:
        """
        Get all commissions generated from one payment.

        Args:
            payment_id: UnifiedPayment ID

        Returns:
            Commissions ordered by level
        """
        stmt = (
            select(Commission)
            .where(Commission.unified_payment_id == payment_id)
            .order_by(Commission.level, Commission.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_payment(self, payment_id: int) -> int:
        """Count commissions generated from one payment."""
        return await self.count(unified_payment_id=payment_id)

    async def insert_commission(self, **data: Any) -> Commission | None:
        """
        Insert commission unless the idempotency key already exists.

        Args:
            **data: Commission fields

        Returns:
            Created commission, or None when (payment, affiliate, level)
            was already recorded
        """
        return await self.insert_or_skip(IDEMPOTENCY_KEY, **data)

    async def get_matured_pending(
        self, payment_date_before: datetime
    ) -> list[Commission]:
        """
        Get pending commissions paid before a cutoff.

        Args:
            payment_date_before: Exclusive upper bound for payment_date

        Returns:
            Pending commissions ordered by affiliate and payment date
        """
        stmt = (
            select(Commission)
            .where(
                Commission.status == CommissionStatus.PENDING,
                Commission.payment_date < payment_date_before,
            )
            .order_by(Commission.affiliate_id, Commission.payment_date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_available(
        self, commission_ids: list[int], available_at: datetime
    ) -> int:
        """
        Promote pending commissions to available in one statement.

        Rows that left the pending state meanwhile are not touched.

        Args:
            commission_ids: Commission IDs to promote
            available_at: Maturation timestamp

        Returns:
            Number of rows promoted
        """
        if not commission_ids:
            return 0

        stmt = (
            update(Commission)
            .where(
                Commission.id.in_(commission_ids),
                Commission.status == CommissionStatus.PENDING,
            )
            .values(
                status=CommissionStatus.AVAILABLE,
                available_date=available_at,
                updated_at=available_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

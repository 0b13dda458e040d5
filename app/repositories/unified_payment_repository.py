"""
UnifiedPayment repository.

Data access layer for UnifiedPayment model.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.unified_payment import UnifiedPayment
from app.repositories.base import BaseRepository


# Invoice identity never changes once recorded
IMMUTABLE_FIELDS = (
    "id",
    "created_at",
    "unified_user_id",
    "amount",
    "currency",
    "stripe_invoice_id",
    "payment_date",
    "processed",
    "processed_at",
    "commissions_generated",
    "last_error",
)


class UnifiedPaymentRepository(BaseRepository[UnifiedPayment]):
    """UnifiedPayment repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize unified payment repository."""
        super().__init__(UnifiedPayment, session)

    async def get_by_invoice(
        self, stripe_invoice_id: str, product_id: str
    ) -> UnifiedPayment | None:
        """Get payment by provider invoice id (first recorded wins)."""
        stmt = (
            select(UnifiedPayment)
            .where(
                UnifiedPayment.stripe_invoice_id == stripe_invoice_id,
                UnifiedPayment.product_id == product_id,
            )
            .order_by(UnifiedPayment.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_payment(self, **data: Any) -> tuple[UnifiedPayment, bool]:
        """
        Record payment keyed on (external_payment_id, product_id).

        Without an external payment id the provider invoice is the key.
        Amount and invoice identity are left untouched on repeat syncs.

        Args:
            **data: UnifiedPayment fields

        Returns:
            Tuple of (payment, created)
        """
        external_payment_id = data.get("external_payment_id")

        if external_payment_id:
            existing = await self.get_by(
                external_payment_id=external_payment_id,
                product_id=data["product_id"],
            )
            payment = await self.upsert(
                ["external_payment_id", "product_id"],
                update_exclude=IMMUTABLE_FIELDS,
                **data,
            )
            return payment, existing is None

        existing = await self.get_by_invoice(
            data["stripe_invoice_id"], data["product_id"]
        )
        if existing is None:
            return await self.create(**data), True

        for key, value in data.items():
            if key not in IMMUTABLE_FIELDS:
                setattr(existing, key, value)
        await self.session.flush()
        return existing, False

    async def get_by_ids(self, payment_ids: list[int]) -> list[UnifiedPayment]:
        """Get payments by id list (unknown ids are ignored)."""
        if not payment_ids:
            return []
        stmt = (
            select(UnifiedPayment)
            .where(UnifiedPayment.id.in_(payment_ids))
            .order_by(UnifiedPayment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unprocessed(self, limit: int) -> list[UnifiedPayment]:
        """
        Get payments still waiting for commission processing.

        Payments with a recorded error are left out: they are retried by
        explicit id once the cause is fixed.

        Args:
            limit: Batch size

        Returns:
            Newest payments first
        """
        stmt = (
            select(UnifiedPayment)
            .where(
                or_(
                    UnifiedPayment.processed.is_(False),
                    UnifiedPayment.processed.is_(None),
                ),
                UnifiedPayment.last_error.is_(None),
            )
            .order_by(UnifiedPayment.created_at.desc(), UnifiedPayment.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_processed(
        self, payment_id: int, commissions_generated: int, processed_at: datetime
    ) -> None:
        """Record successful commission processing."""
        await self._set_tracking(
            payment_id,
            processed=True,
            processed_at=processed_at,
            commissions_generated=commissions_generated,
            last_error=None,
        )

    async def mark_failed(
        self, payment_id: int, error: str, processed_at: datetime
    ) -> None:
        """Record failed commission processing."""
        await self._set_tracking(
            payment_id,
            processed=False,
            processed_at=processed_at,
            commissions_generated=0,
            last_error=error,
        )

    async def _set_tracking(self, payment_id: int, **fields: Any) -> None:
        stmt = (
            update(UnifiedPayment)
            .where(UnifiedPayment.id == payment_id)
            .values(**fields)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

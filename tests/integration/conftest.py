"""
Shared fixtures for integration tests.
"""

import pytest
from sqlalchemy import select

from app.models import Commission, UnifiedPayment


@pytest.fixture
def fetch_payment(session_maker):
    """Reload a payment in a fresh session."""
    async def _fetch(payment_id: int) -> UnifiedPayment:
        async with session_maker() as session:
            return await session.get(UnifiedPayment, payment_id)
    return _fetch


@pytest.fixture
def fetch_commissions(session_maker):
    """All commission rows, optionally for one payment, ordered by level."""
    async def _fetch(payment_id: int | None = None) -> list[Commission]:
        stmt = select(Commission).order_by(Commission.unified_payment_id, Commission.level)
        if payment_id is not None:
            stmt = stmt.where(Commission.unified_payment_id == payment_id)
        async with session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
    return _fetch

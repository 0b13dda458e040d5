"""Pytest configuration and shared fixtures for all tests."""

import itertools
import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

# Minimal environment for settings validation (must run before app imports)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SERVICE_API_KEY", "")
# Sessions in tests share one SQLite connection
os.environ.setdefault("WORKER_POOL_SIZE", "1")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config.database import create_session_maker  # noqa: E402
from app.models import (  # noqa: E402
    AffiliateProfile,
    AppSetting,
    Base,
    Commission,
    CommissionStatus,
    CommissionType,
    Plan,
    PlanType,
    ProductCommissionLevel,
    SubAffiliate,
    Subscription,
    UnifiedPayment,
    UnifiedUser,
)
from app.services.commission.config import CommissionConfig  # noqa: E402
from app.utils.datetime_utils import first_day_of_month, utc_now  # noqa: E402


@pytest.fixture
def commission_config() -> CommissionConfig:
    """
    Commission config used by service tests.

    worker_pool_size=1 keeps per-item sessions sequential: every session
    shares the single in-memory SQLite connection.
    """
    return CommissionConfig(
        holding_period_days=7,
        minimum_withdrawal_amount=Decimal("50.00"),
        max_depth=3,
        batch_size=100,
        worker_pool_size=1,
        store_timeout=5.0,
    )


@pytest.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the test engine."""
    return create_session_maker(db_engine)


@pytest.fixture
async def session(session_maker):
    """Single session for direct repository/service calls."""
    async with session_maker() as session:
        yield session


class Seeder:
    """Writes fixture rows, each helper in its own committed session."""

    def __init__(self, session_maker) -> None:
        self.session_maker = session_maker
        self._ids = itertools.count(1)

    async def _add(self, *objects):
        async with self.session_maker() as session:
            session.add_all(objects)
            await session.commit()
        return objects[0]

    async def user(
        self,
        external_user_id: str = "U1",
        product_id: str = "P1",
        affiliate_id: str | None = None,
    ) -> UnifiedUser:
        return await self._add(
            UnifiedUser(
                external_user_id=external_user_id,
                product_id=product_id,
                email=f"{external_user_id.lower()}@example.com",
                affiliate_id=affiliate_id,
            )
        )

    async def payment(
        self,
        user: UnifiedUser,
        amount: str = "100.00",
        billing_reason: str | None = "subscription_create",
        affiliate_id: str | None = None,
        payment_date: datetime | None = None,
        **fields,
    ) -> UnifiedPayment:
        n = next(self._ids)
        return await self._add(
            UnifiedPayment(
                unified_user_id=user.id,
                product_id=user.product_id,
                stripe_invoice_id=f"in_{n}",
                amount=Decimal(amount),
                billing_reason=billing_reason,
                affiliate_id=affiliate_id,
                payment_date=payment_date or utc_now(),
                **fields,
            )
        )

    async def rate(
        self,
        level: int,
        percentage: str,
        plan_type: PlanType = PlanType.FREE,
        product_id: str = "P1",
        is_active: bool = True,
    ) -> ProductCommissionLevel:
        return await self._add(
            ProductCommissionLevel(
                product_id=product_id,
                plan_type=plan_type,
                level=level,
                percentage=Decimal(percentage),
                is_active=is_active,
            )
        )

    async def edge(self, parent: str, child: str, level: int) -> SubAffiliate:
        return await self._add(
            SubAffiliate(
                parent_affiliate_id=parent, sub_affiliate_id=child, level=level
            )
        )

    async def subscription(
        self, affiliate_id: str, is_free: bool = False, status: str = "active"
    ) -> Subscription:
        plan_id = "free" if is_free else "pro"
        async with self.session_maker() as session:
            if await session.get(Plan, plan_id) is None:
                session.add(Plan(id=plan_id, name=plan_id.upper(), is_free=is_free))
                await session.flush()
            subscription = Subscription(
                user_id=affiliate_id, plan_id=plan_id, status=status
            )
            session.add(subscription)
            await session.commit()
        return subscription

    async def profile(self, affiliate_id: str, withdrawal_day: int) -> AffiliateProfile:
        return await self._add(
            AffiliateProfile(id=affiliate_id, withdrawal_day=withdrawal_day)
        )

    async def setting(self, key: str, value: str) -> AppSetting:
        return await self._add(AppSetting(key=key, value=value))

    async def pending_commission(
        self,
        affiliate_id: str,
        amount: str,
        payment_date: datetime,
        level: int = 1,
    ) -> Commission:
        """Pending commission backed by its own user and payment."""
        n = next(self._ids)
        user = await self.user(external_user_id=f"buyer-{n}")
        payment = await self.payment(user, payment_date=payment_date)
        return await self._add(
            Commission(
                affiliate_id=affiliate_id,
                product_id=user.product_id,
                unified_payment_id=payment.id,
                unified_user_id=user.id,
                amount=Decimal(amount),
                percentage=Decimal("30.00"),
                level=level,
                commission_type=CommissionType.FIRST_SALE,
                status=CommissionStatus.PENDING,
                payment_date=payment_date,
                reference_month=first_day_of_month(payment_date),
            )
        )


@pytest.fixture
def seed(session_maker) -> Seeder:
    """Row factory for integration tests."""
    return Seeder(session_maker)


@pytest.fixture
def days_ago():
    """Build a UTC timestamp N days before a reference time."""
    def _days_ago(days: int, now: datetime | None = None) -> datetime:
        return (now or utc_now()) - timedelta(days=days)
    return _days_ago

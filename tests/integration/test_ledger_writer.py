"""
Integration tests for CommissionLedgerWriter.

Tests cover:
- Amount correctness and per-level rates
- Idempotency of repeated processing
- Rate absence
- Direct-affiliate fallback
- Failure rollback and last_error tracking
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.models import CommissionStatus, CommissionType, PlanType, UnifiedPayment
from app.repositories.commission_repository import CommissionRepository
from app.services.commission.ledger_writer import CommissionLedgerWriter
from app.services.commission.rate_table import CommissionRateTable


async def process(session_maker, config, payment_id: int, reprocessed: bool = False):
    async with session_maker() as session:
        payment = await session.get(UnifiedPayment, payment_id)
        writer = CommissionLedgerWriter(session, config)
        return await writer.process_payment(payment, reprocessed=reprocessed)


class TestCommissionGeneration:
    """Test commission rows written for one payment."""

    @pytest.mark.asyncio
    async def test_pro_affiliate_amount(
        self, seed, session_maker, commission_config, fetch_payment, fetch_commissions
    ):
        """199.90 at a 30% PRO level-1 rate gives 59.97."""
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.subscription("A1")
        await seed.rate(1, "30.00", PlanType.PRO)
        await seed.rate(1, "10.00", PlanType.FREE)
        payment = await seed.payment(user, amount="199.90")

        result = await process(session_maker, commission_config, payment.id)

        assert result.success is True
        assert result.commissions_count == 1

        [commission] = await fetch_commissions(payment.id)
        assert commission.affiliate_id == "A1"
        assert commission.level == 1
        assert commission.amount == Decimal("59.97")
        assert commission.percentage == Decimal("30.00")
        assert commission.commission_type == CommissionType.FIRST_SALE
        assert commission.status == CommissionStatus.PENDING
        assert commission.reference_month.day == 1
        assert "(PRO)" in commission.notes

        stored = await fetch_payment(payment.id)
        assert stored.processed is True
        assert stored.processed_at is not None
        assert stored.commissions_generated == 1
        assert stored.last_error is None

    @pytest.mark.asyncio
    async def test_multi_level_chain(
        self, seed, session_maker, commission_config, fetch_commissions
    ):
        """Each level pays its own rate; levels past max_depth are ignored."""
        user = await seed.user("U1")
        for level, parent in enumerate(["A1", "A2", "A3", "A4"], start=1):
            await seed.edge(parent, "U1", level)
        await seed.rate(1, "30.00")
        await seed.rate(2, "10.00")
        await seed.rate(3, "5.00")
        await seed.rate(4, "1.00")
        payment = await seed.payment(user, billing_reason="subscription_cycle")

        result = await process(session_maker, commission_config, payment.id)

        assert result.commissions_count == 3
        commissions = await fetch_commissions(payment.id)
        assert [(c.affiliate_id, c.level, c.amount) for c in commissions] == [
            ("A1", 1, Decimal("30.00")),
            ("A2", 2, Decimal("10.00")),
            ("A3", 3, Decimal("5.00")),
        ]
        assert all(c.commission_type == CommissionType.RENEWAL for c in commissions)

    @pytest.mark.asyncio
    async def test_missing_level_rate_skips_only_that_level(
        self, seed, session_maker, commission_config, fetch_commissions
    ):
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.edge("A2", "U1", 2)
        await seed.rate(2, "10.00")
        payment = await seed.payment(user)

        result = await process(session_maker, commission_config, payment.id)

        assert result.commissions_count == 1
        [commission] = await fetch_commissions(payment.id)
        assert commission.affiliate_id == "A2"

    @pytest.mark.asyncio
    async def test_rate_absence_still_marks_processed(
        self, seed, session_maker, commission_config, fetch_payment, fetch_commissions
    ):
        """No active rate at any level: zero rows, processed=true."""
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.rate(1, "30.00", is_active=False)
        payment = await seed.payment(user)

        result = await process(session_maker, commission_config, payment.id)

        assert result.success is True
        assert result.commissions_count == 0
        assert await fetch_commissions(payment.id) == []

        stored = await fetch_payment(payment.id)
        assert stored.processed is True
        assert stored.commissions_generated == 0


class TestIdempotency:
    """Test repeated processing of the same payment."""

    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(
        self, seed, session_maker, commission_config, fetch_payment, fetch_commissions
    ):
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.edge("A2", "U1", 2)
        await seed.rate(1, "30.00")
        await seed.rate(2, "10.00")
        payment = await seed.payment(user)

        first = await process(session_maker, commission_config, payment.id)
        rows_after_first = [(c.id, c.affiliate_id, c.level) for c in await fetch_commissions()]

        second = await process(session_maker, commission_config, payment.id)
        rows_after_second = [(c.id, c.affiliate_id, c.level) for c in await fetch_commissions()]

        assert first.commissions_count == 2
        assert second.already_processed is True
        assert second.commissions_count == 2
        assert rows_after_second == rows_after_first

        stored = await fetch_payment(payment.id)
        assert stored.commissions_generated == len(rows_after_second)

    @pytest.mark.asyncio
    async def test_unique_key_skips_duplicate_insert(self, seed, session, days_ago):
        """The store constraint, not the pre-check, prevents double entries."""
        commission = await seed.pending_commission("A1", "30.00", days_ago(1))
        repo = CommissionRepository(session)

        duplicate = await repo.insert_commission(
            affiliate_id="A1",
            product_id="P1",
            unified_payment_id=commission.unified_payment_id,
            unified_user_id=commission.unified_user_id,
            amount=Decimal("30.00"),
            percentage=Decimal("30.00"),
            level=1,
            commission_type=CommissionType.FIRST_SALE,
            status=CommissionStatus.PENDING,
            payment_date=commission.payment_date,
            reference_month=commission.reference_month,
        )

        assert duplicate is None
        assert await repo.count_for_payment(commission.unified_payment_id) == 1


class TestFallback:
    """Test direct-affiliate fallback."""

    @pytest.mark.asyncio
    async def test_payment_affiliate_without_hierarchy(
        self, seed, session_maker, commission_config, fetch_commissions
    ):
        """No edges + payment.affiliate_id=A gives one level-1 commission for A."""
        user = await seed.user("U1")
        await seed.rate(1, "30.00")
        payment = await seed.payment(user, affiliate_id="A9")

        result = await process(session_maker, commission_config, payment.id)

        assert result.commissions_count == 1
        [commission] = await fetch_commissions(payment.id)
        assert commission.affiliate_id == "A9"
        assert commission.level == 1
        assert "direct" in commission.notes

    @pytest.mark.asyncio
    async def test_user_affiliate_without_hierarchy(
        self, seed, session_maker, commission_config, fetch_commissions
    ):
        user = await seed.user("U1", affiliate_id="A7")
        await seed.rate(1, "30.00")
        payment = await seed.payment(user)

        await process(session_maker, commission_config, payment.id)

        [commission] = await fetch_commissions(payment.id)
        assert commission.affiliate_id == "A7"

    @pytest.mark.asyncio
    async def test_hierarchy_wins_over_payment_affiliate(
        self, seed, session_maker, commission_config, fetch_commissions
    ):
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.rate(1, "30.00")
        payment = await seed.payment(user, affiliate_id="A9")

        await process(session_maker, commission_config, payment.id)

        assert [c.affiliate_id for c in await fetch_commissions(payment.id)] == ["A1"]

    @pytest.mark.asyncio
    async def test_no_affiliate_at_all(
        self, seed, session_maker, commission_config, fetch_payment
    ):
        user = await seed.user("U1")
        await seed.rate(1, "30.00")
        payment = await seed.payment(user)

        result = await process(session_maker, commission_config, payment.id)

        assert result.success is True
        assert result.commissions_count == 0
        assert (await fetch_payment(payment.id)).processed is True


class TestFailure:
    """Test failure handling."""

    @pytest.mark.asyncio
    async def test_failure_rolls_back_and_records_error(
        self,
        seed,
        session_maker,
        commission_config,
        fetch_payment,
        fetch_commissions,
        monkeypatch,
    ):
        """A level-2 store error leaves no level-1 row behind."""
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.edge("A2", "U1", 2)
        await seed.rate(1, "30.00")
        await seed.rate(2, "10.00")
        payment = await seed.payment(user)

        original = CommissionRateTable.get_rate

        async def flaky_get_rate(self, product_id, plan_type, level):
            if level == 2:
                raise OperationalError(
                    "SELECT", {}, ConnectionResetError("server closed the connection")
                )
            return await original(self, product_id, plan_type, level)

        monkeypatch.setattr(CommissionRateTable, "get_rate", flaky_get_rate)

        result = await process(session_maker, commission_config, payment.id)

        assert result.success is False
        assert result.retryable is True
        assert "server closed the connection" in result.error_message
        assert await fetch_commissions(payment.id) == []

        stored = await fetch_payment(payment.id)
        assert stored.processed is False
        assert stored.commissions_generated == 0
        assert "server closed the connection" in stored.last_error

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(
        self, seed, session_maker, commission_config, fetch_payment
    ):
        user = await seed.user("U1")
        await seed.edge("A1", "U1", 1)
        await seed.rate(1, "30.00")
        payment = await seed.payment(user, processed=False, last_error="timeout")

        result = await process(session_maker, commission_config, payment.id)

        assert result.success is True
        assert (await fetch_payment(payment.id)).last_error is None

"""
Integration tests for PayoutMaturationService.

Tests cover:
- Holding period, withdrawal day and minimum gating
- Weekend normalization
- Per-affiliate failure isolation
- Report shape
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError

from app.models import CommissionStatus, MaturationStatus
from app.repositories.commission_repository import CommissionRepository
from app.services.commission.maturation import PayoutMaturationService


MONDAY = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)
WEDNESDAY = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)
SATURDAY = datetime(2026, 2, 28, 12, 0, tzinfo=UTC)
SUNDAY = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def maturation(session_maker, commission_config):
    """Maturation service: 7 day hold, 50.00 minimum."""
    return PayoutMaturationService(session_maker, commission_config)


def detail_for(report, affiliate_id):
    return next(d for d in report.details if d.affiliate_id == affiliate_id)


class TestGating:
    """Test the pending -> available conditions."""

    @pytest.mark.asyncio
    async def test_wrong_withdrawal_day(
        self, seed, maturation, fetch_commissions, days_ago
    ):
        """Aged 10 days, but X withdraws on Wednesday and today is Monday."""
        await seed.profile("X", withdrawal_day=3)
        await seed.pending_commission("X", "100.00", days_ago(10, MONDAY))

        report = await maturation.run(now=MONDAY)

        assert detail_for(report, "X").status == MaturationStatus.WAITING_WITHDRAWAL_DAY
        assert report.processed == 0
        [commission] = await fetch_commissions()
        assert commission.status == CommissionStatus.PENDING

    @pytest.mark.asyncio
    async def test_below_minimum_on_correct_day(
        self, seed, maturation, fetch_commissions, days_ago
    ):
        await seed.profile("X", withdrawal_day=1)
        await seed.pending_commission("X", "40.00", days_ago(10, MONDAY))

        report = await maturation.run(now=MONDAY)

        assert detail_for(report, "X").status == MaturationStatus.BELOW_MINIMUM
        [commission] = await fetch_commissions()
        assert commission.status == CommissionStatus.PENDING

    @pytest.mark.asyncio
    async def test_promoted_when_both_hold(
        self, seed, maturation, fetch_commissions, days_ago
    ):
        await seed.profile("X", withdrawal_day=3)
        await seed.pending_commission("X", "30.00", days_ago(10, WEDNESDAY))
        await seed.pending_commission("X", "25.00", days_ago(8, WEDNESDAY))

        report = await maturation.run(now=WEDNESDAY)

        detail = detail_for(report, "X")
        assert detail.status == MaturationStatus.PROCESSED
        assert detail.commissions_count == 2
        assert report.processed == 2

        for commission in await fetch_commissions():
            assert commission.status == CommissionStatus.AVAILABLE
            assert commission.available_date is not None

    @pytest.mark.asyncio
    async def test_holding_period_not_elapsed(
        self, seed, maturation, fetch_commissions, days_ago
    ):
        """Young commissions are neither promoted nor counted."""
        await seed.pending_commission("X", "100.00", days_ago(3, MONDAY))

        report = await maturation.run(now=MONDAY)

        assert report.total_pending == 0
        assert report.details == []
        [commission] = await fetch_commissions()
        assert commission.status == CommissionStatus.PENDING

    @pytest.mark.asyncio
    async def test_young_commissions_do_not_count_toward_minimum(
        self, seed, maturation, days_ago
    ):
        await seed.pending_commission("X", "40.00", days_ago(10, MONDAY))
        await seed.pending_commission("X", "40.00", days_ago(2, MONDAY))

        report = await maturation.run(now=MONDAY)

        detail = detail_for(report, "X")
        assert detail.status == MaturationStatus.BELOW_MINIMUM
        assert detail.commissions_count == 1

    @pytest.mark.asyncio
    async def test_missing_profile_defaults_to_monday(
        self, seed, maturation, days_ago
    ):
        await seed.pending_commission("NOPROFILE", "60.00", days_ago(10, MONDAY))

        report = await maturation.run(now=MONDAY)

        detail = detail_for(report, "NOPROFILE")
        assert detail.withdrawal_day == 1
        assert detail.status == MaturationStatus.PROCESSED


class TestWeekend:
    """Weekend runs are evaluated as Monday."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("now", [SATURDAY, SUNDAY])
    async def test_monday_affiliate_evaluated_on_weekend(
        self, seed, maturation, days_ago, now
    ):
        await seed.profile("X", withdrawal_day=1)
        await seed.profile("Y", withdrawal_day=5)
        await seed.pending_commission("X", "60.00", days_ago(10, now))
        await seed.pending_commission("Y", "60.00", days_ago(10, now))

        report = await maturation.run(now=now)

        assert report.to_dict()["config"]["current_day"] == 1
        assert detail_for(report, "X").status == MaturationStatus.PROCESSED
        assert detail_for(report, "Y").status == MaturationStatus.WAITING_WITHDRAWAL_DAY


class TestFailureIsolation:
    """One affiliate's failure does not block the others."""

    @pytest.mark.asyncio
    async def test_failed_affiliate_is_reported(
        self, seed, maturation, fetch_commissions, days_ago, monkeypatch
    ):
        good = await seed.pending_commission("GOOD", "60.00", days_ago(10, MONDAY))
        bad = await seed.pending_commission("BAD", "60.00", days_ago(10, MONDAY))

        original = CommissionRepository.mark_available

        async def flaky_mark_available(self, commission_ids, available_at):
            if bad.id in commission_ids:
                raise OperationalError(
                    "UPDATE", {}, ConnectionResetError("server closed the connection")
                )
            return await original(self, commission_ids, available_at)

        monkeypatch.setattr(CommissionRepository, "mark_available", flaky_mark_available)

        report = await maturation.run(now=MONDAY)

        assert detail_for(report, "GOOD").status == MaturationStatus.PROCESSED
        failed = detail_for(report, "BAD")
        assert failed.status == MaturationStatus.ERROR
        assert "server closed the connection" in failed.error
        assert [d.affiliate_id for d in report.errors] == ["BAD"]

        statuses = {c.id: c.status for c in await fetch_commissions()}
        assert statuses[good.id] == CommissionStatus.AVAILABLE
        assert statuses[bad.id] == CommissionStatus.PENDING


class TestReport:
    """Test report shape."""

    @pytest.mark.asyncio
    async def test_report_dict(self, seed, maturation, days_ago):
        await seed.pending_commission("X", "60.00", days_ago(10, MONDAY))
        await seed.pending_commission("Y", "10.00", days_ago(10, MONDAY))

        data = (await maturation.run(now=MONDAY)).to_dict()

        assert data["processed"] == 1
        assert data["total_pending"] == 2
        assert data["config"] == {
            "days_to_available": 7,
            "min_withdrawal": 50.0,
            "current_day": 1,
        }
        details = {d["affiliate_id"]: d for d in data["details"]}
        assert details["X"] == {
            "affiliate_id": "X",
            "status": "processed",
            "amount": 60.0,
            "commissions_count": 1,
            "withdrawal_day": 1,
        }
        assert details["Y"]["status"] == "below_minimum"

    @pytest.mark.asyncio
    async def test_nothing_pending(self, maturation):
        report = await maturation.run(now=MONDAY)
        assert report.processed == 0
        assert report.total_pending == 0

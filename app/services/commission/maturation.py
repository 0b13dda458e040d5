"""
Payout maturation.

Promotes pending commissions to available once they have aged past the
holding period, it is the affiliate's withdrawal day and the matured
total clears the minimum withdrawal.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.business_constants import DEFAULT_WITHDRAWAL_DAY
from app.models.enums import MaturationStatus
from app.repositories.affiliate_profile_repository import (
    AffiliateProfileRepository,
)
from app.repositories.commission_repository import CommissionRepository
from app.services.commission.config import CommissionConfig
from app.utils.datetime_utils import business_weekday, end_of_day, ensure_utc, utc_now
from app.utils.exceptions import error_message


@dataclass
class AffiliateBatch:
    """Matured pending commissions of one affiliate."""

    affiliate_id: str
    withdrawal_day: int
    commission_ids: list[int] = field(default_factory=list)
    amount: Decimal = Decimal("0")


@dataclass
class AffiliateOutcome:
    """Per-affiliate line of the maturation report."""

    affiliate_id: str
    status: MaturationStatus
    amount: Decimal
    commissions_count: int
    withdrawal_day: int
    error: str | None = None

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        data = {
            "affiliate_id": self.affiliate_id,
            "status": self.status.value,
            "amount": float(self.amount),
            "commissions_count": self.commissions_count,
            "withdrawal_day": self.withdrawal_day,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class MaturationReport:
    """Outcome of one maturation run."""

    processed: int
    total_pending: int
    details: list[AffiliateOutcome]
    days_to_available: int
    min_withdrawal: Decimal
    current_day: int

    @property
    def errors(self) -> list[AffiliateOutcome]:
        """Affiliates whose promotion failed."""
        return [d for d in self.details if d.status == MaturationStatus.ERROR]

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        return {
            "processed": self.processed,
            "total_pending": self.total_pending,
            "details": [d.to_dict() for d in self.details],
            "config": {
                "days_to_available": self.days_to_available,
                "min_withdrawal": float(self.min_withdrawal),
                "current_day": self.current_day,
            },
        }


class PayoutMaturationService:
    """
    Periodic pending -> available promotion.

    Each affiliate's batch is promoted by one UPDATE in its own
    transaction: all of the batch or none of it, and a failure for one
    affiliate does not stop the others.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        config: CommissionConfig,
    ) -> None:
        """
        Initialize maturation service.

        Args:
            session_maker: Factory for per-affiliate sessions
            config: Commission config snapshot for this run
        """
        self.session_maker = session_maker
        self.config = config

    async def run(self, now: datetime | None = None) -> MaturationReport:
        """
        Promote matured commissions.

        Args:
            now: Current time (defaults to UTC now)

        Returns:
            MaturationReport
        """
        now = ensure_utc(now) if now else utc_now()
        today = now.date()
        current_day = business_weekday(today)
        cutoff_day = today - timedelta(days=self.config.holding_period_days)

        logger.info(
            "Starting commission maturation",
            extra={
                "holding_period_days": self.config.holding_period_days,
                "cutoff_day": cutoff_day.isoformat(),
                "current_day": current_day,
            },
        )

        batches = await self._load_batches(end_of_day(cutoff_day))
        total_pending = sum(len(b.commission_ids) for b in batches)

        if not batches:
            logger.info("No pending commissions to mature")
            return self._report(0, 0, [], current_day)

        semaphore = asyncio.Semaphore(self.config.worker_pool_size)

        async def worker(batch: AffiliateBatch) -> AffiliateOutcome:
            async with semaphore:
                return await self._process_affiliate(batch, current_day, now)

        outcomes = list(await asyncio.gather(*(worker(b) for b in batches)))
        processed = sum(
            o.commissions_count
            for o in outcomes
            if o.status == MaturationStatus.PROCESSED
        )

        logger.info(
            "Commission maturation complete",
            extra={
                "processed": processed,
                "total_pending": total_pending,
                "affiliates": len(outcomes),
                "errors": sum(
                    1 for o in outcomes if o.status == MaturationStatus.ERROR
                ),
            },
        )

        return self._report(processed, total_pending, outcomes, current_day)

    async def _load_batches(self, payment_date_before: datetime) -> list[AffiliateBatch]:
        """Group matured pending commissions by affiliate."""
        async with self.session_maker() as session:
            commissions = await CommissionRepository(session).get_matured_pending(
                payment_date_before
            )

            grouped: dict[str, list] = defaultdict(list)
            for commission in commissions:
                grouped[commission.affiliate_id].append(commission)

            withdrawal_days = await AffiliateProfileRepository(
                session
            ).get_withdrawal_days(list(grouped))

        batches = []
        for affiliate_id, rows in grouped.items():
            batches.append(
                AffiliateBatch(
                    affiliate_id=affiliate_id,
                    withdrawal_day=withdrawal_days.get(
                        affiliate_id, DEFAULT_WITHDRAWAL_DAY
                    ),
                    commission_ids=[c.id for c in rows],
                    amount=sum((Decimal(c.amount) for c in rows), Decimal("0")),
                )
            )
        return batches

    async def _process_affiliate(
        self, batch: AffiliateBatch, current_day: int, now: datetime
    ) -> AffiliateOutcome:
        """Promote one affiliate's batch if it is their day and above minimum."""
        outcome = AffiliateOutcome(
            affiliate_id=batch.affiliate_id,
            status=MaturationStatus.PROCESSED,
            amount=batch.amount,
            commissions_count=len(batch.commission_ids),
            withdrawal_day=batch.withdrawal_day,
        )

        if batch.withdrawal_day != current_day:
            logger.info(
                "Affiliate waiting for withdrawal day",
                extra={
                    "affiliate_id": batch.affiliate_id,
                    "withdrawal_day": batch.withdrawal_day,
                    "current_day": current_day,
                },
            )
            outcome.status = MaturationStatus.WAITING_WITHDRAWAL_DAY
            return outcome

        if batch.amount < self.config.minimum_withdrawal_amount:
            logger.info(
                "Affiliate below minimum withdrawal",
                extra={
                    "affiliate_id": batch.affiliate_id,
                    "amount": str(batch.amount),
                    "minimum": str(self.config.minimum_withdrawal_amount),
                },
            )
            outcome.status = MaturationStatus.BELOW_MINIMUM
            return outcome

        try:
            async with self.session_maker() as session:
                async with session.begin():
                    promoted = await CommissionRepository(session).mark_available(
                        batch.commission_ids, now
                    )
        except Exception as e:
            logger.opt(exception=e).error(
                "Failed to promote commissions",
                extra={"affiliate_id": batch.affiliate_id},
            )
            outcome.status = MaturationStatus.ERROR
            outcome.error = error_message(e)
            return outcome

        outcome.commissions_count = promoted
        logger.info(
            "Commissions available",
            extra={
                "affiliate_id": batch.affiliate_id,
                "commissions_count": promoted,
                "amount": str(batch.amount),
            },
        )
        return outcome

    def _report(
        self,
        processed: int,
        total_pending: int,
        details: list[AffiliateOutcome],
        current_day: int,
    ) -> MaturationReport:
        return MaturationReport(
            processed=processed,
            total_pending=total_pending,
            details=details,
            days_to_available=self.config.holding_period_days,
            min_withdrawal=self.config.minimum_withdrawal_amount,
            current_day=current_day,
        )

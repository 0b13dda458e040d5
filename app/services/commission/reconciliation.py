"""
Commission reconciliation.

Finds payments whose commissions were never written (or whose tracking
fields were never updated) and completes them without duplicating rows.
"""

import asyncio
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.enums import ReprocessStatus
from app.repositories.commission_repository import CommissionRepository
from app.repositories.unified_payment_repository import UnifiedPaymentRepository
from app.services.commission.config import CommissionConfig
from app.services.commission.ledger_writer import CommissionLedgerWriter
from app.utils.exceptions import PartialFailure, error_message


@dataclass
class ReprocessResult:
    """Outcome for one payment."""

    payment_id: int
    status: ReprocessStatus
    message: str
    commissions_count: int | None = None

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        data = {
            "payment_id": self.payment_id,
            "status": self.status.value,
            "message": self.message,
        }
        if self.commissions_count is not None:
            data["commissions_count"] = self.commissions_count
        return data


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation run."""

    results: list[ReprocessResult] = field(default_factory=list)

    @property
    def summary(self) -> dict[str, int]:
        """Counters per status."""
        return {
            "total": len(self.results),
            "already_processed": self._count(ReprocessStatus.ALREADY_PROCESSED),
            "commissions_found": self._count(ReprocessStatus.COMMISSIONS_FOUND),
            "reprocessed": self._count(ReprocessStatus.REPROCESSED),
            "errors": self._count(ReprocessStatus.ERROR),
        }

    @property
    def failures(self) -> list[PartialFailure]:
        """Failed payments as PartialFailure records."""
        return [
            PartialFailure(r.payment_id, r.message)
            for r in self.results
            if r.status == ReprocessStatus.ERROR
        ]

    def to_dict(self) -> dict:
        """JSON-ready representation."""
        return {
            "summary": self.summary,
            "results": [r.to_dict() for r in self.results],
        }

    def _count(self, status: ReprocessStatus) -> int:
        return sum(1 for r in self.results if r.status == status)


class CommissionReconciliationService:
    """
    Reprocesses payments in isolation from each other.

    Every payment gets its own session, so one failure never rolls back
    another payment's work. Safety against concurrent or repeated runs
    comes from the commission idempotency key, not from locking.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        config: CommissionConfig,
    ) -> None:
        """
        Initialize reconciliation service.

        Args:
            session_maker: Factory for per-payment sessions
            config: Commission config snapshot for this run
        """
        self.session_maker = session_maker
        self.config = config

    async def run(
        self,
        payment_ids: list[int] | None = None,
        process_all_pending: bool = False,
    ) -> ReconciliationReport:
        """
        Reconcile a batch of payments.

        Args:
            payment_ids: Explicit payments to check
            process_all_pending: Sweep unprocessed payments without errors
                (newest first, capped at config.batch_size); wins over ids

        Returns:
            ReconciliationReport
        """
        ids = await self._select_payment_ids(payment_ids, process_all_pending)

        if not ids:
            logger.info("No payments to reconcile")
            return ReconciliationReport()

        logger.info(f"Reconciling {len(ids)} payments...")

        semaphore = asyncio.Semaphore(self.config.worker_pool_size)

        async def worker(payment_id: int) -> ReprocessResult:
            async with semaphore:
                return await self._reconcile_payment_safe(payment_id)

        results = await asyncio.gather(*(worker(pid) for pid in ids))
        report = ReconciliationReport(results=list(results))

        logger.info("Reconciliation complete", extra=report.summary)

        return report

    async def _select_payment_ids(
        self, payment_ids: list[int] | None, process_all_pending: bool
    ) -> list[int]:
        async with self.session_maker() as session:
            repo = UnifiedPaymentRepository(session)
            if process_all_pending:
                payments = await repo.get_unprocessed(self.config.batch_size)
                logger.info(f"Found {len(payments)} pending payments to process")
            elif payment_ids:
                payments = await repo.get_by_ids(payment_ids)
                missing = set(payment_ids) - {p.id for p in payments}
                if missing:
                    logger.warning(
                        "Unknown payment ids ignored",
                        extra={"payment_ids": sorted(missing)},
                    )
            else:
                payments = []
        return [p.id for p in payments]

    async def _reconcile_payment_safe(self, payment_id: int) -> ReprocessResult:
        """Reconcile one payment; never raises."""
        try:
            async with self.session_maker() as session:
                return await self._reconcile_payment(session, payment_id)
        except Exception as e:
            logger.opt(exception=e).error(
                f"Error processing payment {payment_id}"
            )
            return ReprocessResult(
                payment_id=payment_id,
                status=ReprocessStatus.ERROR,
                message=error_message(e),
            )

    async def _reconcile_payment(
        self, session: AsyncSession, payment_id: int
    ) -> ReprocessResult:
        payment_repo = UnifiedPaymentRepository(session)
        commission_repo = CommissionRepository(session)
        writer = CommissionLedgerWriter(session, self.config)

        payment = await payment_repo.get_by_id(payment_id)
        if payment is None:
            return ReprocessResult(
                payment_id=payment_id,
                status=ReprocessStatus.ERROR,
                message="Payment not found",
            )

        existing = await commission_repo.count_for_payment(payment_id)

        if existing:
            if payment.processed and payment.commissions_generated == existing:
                return ReprocessResult(
                    payment_id=payment_id,
                    status=ReprocessStatus.ALREADY_PROCESSED,
                    message=f"{existing} commission(s) already recorded",
                    commissions_count=existing,
                )

            result = await writer.repair_tracking(payment_id, existing)
            if not result.success:
                return self._error(result.payment_id, result.error_message)
            return ReprocessResult(
                payment_id=payment_id,
                status=ReprocessStatus.COMMISSIONS_FOUND,
                message=f"{existing} commission(s) already existed - tracking updated",
                commissions_count=existing,
            )

        if payment.processed:
            return ReprocessResult(
                payment_id=payment_id,
                status=ReprocessStatus.ALREADY_PROCESSED,
                message="Payment already processed without commissions",
                commissions_count=0,
            )

        result = await writer.generate_commissions(payment, reprocessed=True)
        if not result.success:
            return self._error(result.payment_id, result.error_message)

        return ReprocessResult(
            payment_id=payment_id,
            status=ReprocessStatus.REPROCESSED,
            message=f"{result.commissions_count} commission(s) generated",
            commissions_count=result.commissions_count,
        )

    @staticmethod
    def _error(payment_id: int, message: str | None) -> ReprocessResult:
        return ReprocessResult(
            payment_id=payment_id,
            status=ReprocessStatus.ERROR,
            message=message or "Unknown error while generating commissions",
        )

"""
Commission ledger writer.

Turns one paid invoice into one pending commission per eligible
hierarchy level, exactly once per (payment, affiliate, level).
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import CommissionStatus
from app.models.unified_payment import UnifiedPayment
from app.repositories.commission_repository import CommissionRepository
from app.repositories.unified_payment_repository import UnifiedPaymentRepository
from app.repositories.unified_user_repository import UnifiedUserRepository
from app.services.commission.calculator import (
    build_commission_notes,
    calculate_commission_amount,
    commission_type_for,
    reference_month_for,
)
from app.services.commission.config import CommissionConfig
from app.services.commission.hierarchy_resolver import HierarchyResolver
from app.services.commission.rate_table import CommissionRateTable
from app.utils.datetime_utils import ensure_utc, utc_now
from app.utils.exceptions import DuplicateSkipped, error_message, is_retryable


@dataclass
class LedgerResult:
    """Result of processing one payment."""

    payment_id: int
    success: bool
    commissions_count: int = 0
    already_processed: bool = False
    error_message: str | None = None
    retryable: bool = False


class CommissionLedgerWriter:
    """
    Writes commission rows for paid invoices.

    All rows of one payment and its tracking-field update are committed
    together. A failure rolls the whole payment back, records last_error
    and leaves processed=false so reconciliation can pick it up.
    """

    def __init__(self, session: AsyncSession, config: CommissionConfig) -> None:
        """
        Initialize ledger writer.

        Args:
            session: Async database session (committed by the writer)
            config: Commission config snapshot for this invocation
        """
        self.session = session
        self.config = config
        self.commission_repo = CommissionRepository(session)
        self.payment_repo = UnifiedPaymentRepository(session)
        self.user_repo = UnifiedUserRepository(session)
        self.resolver = HierarchyResolver(
            session, config.max_depth, config.store_timeout
        )
        self.rate_table = CommissionRateTable(session, config.store_timeout)

    async def process_payment(
        self, payment: UnifiedPayment, reprocessed: bool = False
    ) -> LedgerResult:
        """
        Process commissions for a payment.

        Args:
            payment: Stored UnifiedPayment
            reprocessed: Called from reconciliation (marks notes)

        Returns:
            LedgerResult
        """
        payment_id = payment.id

        try:
            existing = await self.commission_repo.count_for_payment(payment_id)
        except Exception as e:
            return await self._fail(payment_id, e)

        if existing:
            return await self.repair_tracking(payment_id, existing)

        return await self.generate_commissions(payment, reprocessed=reprocessed)

    async def repair_tracking(
        self, payment_id: int, commissions_count: int
    ) -> LedgerResult:
        """
        Mark payment processed from rows that already exist.

        Covers a crash between writing the rows and updating the payment.
        No new rows are created.

        Args:
            payment_id: UnifiedPayment ID
            commissions_count: Existing commission rows

        Returns:
            LedgerResult with already_processed=True
        """
        try:
            await self.payment_repo.mark_processed(
                payment_id, commissions_count, utc_now()
            )
            await self.session.commit()
        except Exception as e:
            return await self._fail(payment_id, e)

        logger.info(
            "Payment already had commissions, tracking updated",
            extra={
                "payment_id": payment_id,
                "commissions_count": commissions_count,
            },
        )

        return LedgerResult(
            payment_id=payment_id,
            success=True,
            commissions_count=commissions_count,
            already_processed=True,
        )

    async def generate_commissions(
        self, payment: UnifiedPayment, reprocessed: bool = False
    ) -> LedgerResult:
        """
        Walk the hierarchy and write one commission per paying level.

        Args:
            payment: Stored UnifiedPayment without commission rows
            reprocessed: Called from reconciliation (marks notes)

        Returns:
            LedgerResult
        """
        payment_id = payment.id

        try:
            created = await self._write_levels(payment, reprocessed)
            total = await self.commission_repo.count_for_payment(payment_id)
            await self.payment_repo.mark_processed(payment_id, total, utc_now())
            await self.session.commit()
        except Exception as e:
            return await self._fail(payment_id, e)

        logger.info(
            "Commissions processed for payment",
            extra={
                "payment_id": payment_id,
                "created": created,
                "commissions_count": total,
                "reprocessed": reprocessed,
            },
        )

        return LedgerResult(
            payment_id=payment_id, success=True, commissions_count=total
        )

    async def _write_levels(
        self, payment: UnifiedPayment, reprocessed: bool
    ) -> int:
        """Insert commission rows; returns how many were newly created."""
        user = await self.user_repo.get_by_id(payment.unified_user_id)
        descendant_id = user.external_user_id if user else None
        # The payment's own attribution wins over the one stored on the user
        direct_affiliate_id = payment.affiliate_id or (
            user.affiliate_id if user else None
        )

        edges = await self.resolver.resolve_with_fallback(
            descendant_id, direct_affiliate_id
        )
        if not edges:
            logger.debug(
                "Payment has no referring affiliate",
                extra={"payment_id": payment.id},
            )
            return 0

        commission_type = commission_type_for(payment.billing_reason)
        payment_date = ensure_utc(payment.payment_date)
        reference_month = reference_month_for(payment_date)
        created = 0

        for edge in edges:
            plan_type = await self.rate_table.get_plan_type(edge.affiliate_id)
            percentage = await self.rate_table.get_rate(
                payment.product_id, plan_type, edge.level
            )
            if percentage is None:
                continue

            amount = calculate_commission_amount(
                payment.amount, percentage, payment.currency
            )
            if amount <= 0:
                continue

            commission = await self.commission_repo.insert_commission(
                affiliate_id=edge.affiliate_id,
                product_id=payment.product_id,
                unified_payment_id=payment.id,
                unified_user_id=payment.unified_user_id,
                amount=amount,
                percentage=percentage,
                level=edge.level,
                commission_type=commission_type,
                status=CommissionStatus.PENDING,
                payment_date=payment_date,
                reference_month=reference_month,
                notes=build_commission_notes(
                    edge.level,
                    plan_type,
                    payment.product_id,
                    reprocessed=reprocessed,
                    direct=edge.direct_fallback,
                ),
            )

            if commission is None:
                skipped = DuplicateSkipped(payment.id, edge.affiliate_id, edge.level)
                logger.warning(str(skipped))
                continue

            created += 1
            logger.info(
                f"Commission L{edge.level} created",
                extra={
                    "payment_id": payment.id,
                    "affiliate_id": edge.affiliate_id,
                    "plan_type": plan_type.value,
                    "level": edge.level,
                    "percentage": str(percentage),
                    "amount": str(amount),
                    "commission_type": commission_type.value,
                },
            )

        return created

    async def _fail(self, payment_id: int, exc: Exception) -> LedgerResult:
        """Roll back the payment's work and persist the failure reason."""
        message = error_message(exc)
        retryable = is_retryable(exc)

        await self.session.rollback()
        logger.opt(exception=exc).error(
            "Commission processing failed",
            extra={
                "payment_id": payment_id,
                "error": message,
                "retryable": retryable,
            },
        )

        try:
            await self.payment_repo.mark_failed(payment_id, message, utc_now())
            await self.session.commit()
        except Exception as tracking_error:
            # processed stays false, so the next reconciliation sweep retries it
            await self.session.rollback()
            logger.opt(exception=tracking_error).error(
                "Could not record commission failure",
                extra={"payment_id": payment_id},
            )

        return LedgerResult(
            payment_id=payment_id,
            success=False,
            error_message=message,
            retryable=retryable,
        )

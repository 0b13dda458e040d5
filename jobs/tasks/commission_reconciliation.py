"""
Commission reconciliation task.

Finds payments whose commissions were never written and completes them.
Runs hourly from the scheduler; can also be sent with explicit ids.
"""

import dramatiq
from loguru import logger

from app.services.commission.config import load_commission_config
from app.services.commission.reconciliation import (
    CommissionReconciliationService,
    ReconciliationReport,
)
from jobs.async_runner import local_session_maker, run_async
from jobs.broker import COMMISSION_QUEUE


@dramatiq.actor(queue_name=COMMISSION_QUEUE, time_limit=600_000)  # 10 min timeout
def reprocess_pending_commissions(payment_ids: list[int] | None = None) -> dict:
    """
    Reconcile commission processing.

    Without payment_ids, sweeps unprocessed payments that have no
    recorded error. Per-payment failures are reported, not raised.

    Args:
        payment_ids: Explicit payments to reconcile

    Returns:
        Reconciliation summary
    """
    logger.info("Starting commission reconciliation...")

    try:
        report = run_async(_reprocess_async(payment_ids))
    except Exception as e:
        logger.exception(f"Commission reconciliation failed: {e}")
        raise

    summary = report.summary
    logger.info("Commission reconciliation complete", extra=summary)
    for failure in report.failures:
        logger.warning(
            f"Payment {failure.item_id} not reconciled: {failure.message}"
        )
    return summary


async def _reprocess_async(
    payment_ids: list[int] | None,
) -> ReconciliationReport:
    """Async implementation of commission reconciliation."""
    async with local_session_maker() as session_maker:
        async with session_maker() as session:
            config = await load_commission_config(session)

        service = CommissionReconciliationService(session_maker, config)
        return await service.run(
            payment_ids=payment_ids,
            process_all_pending=not payment_ids,
        )

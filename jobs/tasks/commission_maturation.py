"""
Commission maturation task.

Promotes pending commissions to available on each affiliate's
withdrawal day. Scheduled according to commission_check_schedule.
"""

import dramatiq
from loguru import logger

from app.services.commission.config import load_commission_config
from app.services.commission.maturation import (
    MaturationReport,
    PayoutMaturationService,
)
from jobs.async_runner import local_session_maker, run_async
from jobs.broker import COMMISSION_QUEUE


@dramatiq.actor(queue_name=COMMISSION_QUEUE, time_limit=300_000)  # 5 min timeout
def process_commission_status() -> dict:
    """
    Promote matured commissions.

    Returns:
        Aggregate counters of the run
    """
    logger.info("Starting commission maturation...")

    try:
        report = run_async(_process_commission_status_async())
    except Exception as e:
        logger.exception(f"Commission maturation failed: {e}")
        raise

    for outcome in report.errors:
        logger.warning(
            f"Affiliate {outcome.affiliate_id} not promoted: {outcome.error}"
        )
    return {
        "processed": report.processed,
        "total_pending": report.total_pending,
        "errors": len(report.errors),
    }


async def _process_commission_status_async() -> MaturationReport:
    """Async implementation of commission maturation."""
    async with local_session_maker() as session_maker:
        async with session_maker() as session:
            config = await load_commission_config(session)

        service = PayoutMaturationService(session_maker, config)
        return await service.run()

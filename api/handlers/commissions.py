"""
Commission batch triggers.

POST /reprocess-commissions and POST /process-commission-status run
the same services as the scheduled jobs, synchronously.
"""

from aiohttp import web
from loguru import logger

from api.app_keys import SESSION_MAKER
from api.handlers.common import parse_body, request_config
from app.schemas.commission import MaturationTriggerRequest, ReprocessRequest
from app.services.commission.maturation import PayoutMaturationService
from app.services.commission.reconciliation import CommissionReconciliationService


async def reprocess_commissions(request: web.Request) -> web.Response:
    """
    Reconcile explicit payments or sweep pending ones.

    Returns:
        {"success": true, "summary": {...}, "results": [...]}
    """
    body = await parse_body(request, ReprocessRequest, required=False)
    config = await request_config(request)

    service = CommissionReconciliationService(request.app[SESSION_MAKER], config)
    report = await service.run(
        payment_ids=body.payment_ids,
        process_all_pending=body.process_all_pending,
    )

    return web.json_response({"success": True, **report.to_dict()})


async def process_commission_status(request: web.Request) -> web.Response:
    """
    Promote matured pending commissions.

    Returns:
        {"success": true, "processed": N, "total_pending": N,
        "details": [...], "config": {...}}
    """
    body = await parse_body(request, MaturationTriggerRequest, required=False)
    if body.triggered_at:
        logger.info(f"Maturation triggered at {body.triggered_at.isoformat()}")

    config = await request_config(request)

    service = PayoutMaturationService(request.app[SESSION_MAKER], config)
    report = await service.run()

    return web.json_response({"success": True, **report.to_dict()})

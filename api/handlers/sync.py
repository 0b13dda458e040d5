"""
POST /sync-unified-data handler.
"""

from aiohttp import web

from api.app_keys import SESSION_MAKER
from api.handlers.common import parse_body, request_config
from app.schemas.sync import SyncRequest, UnifiedPaymentResponse, UnifiedUserResponse
from app.services.unified_sync_service import SyncOutcome, UnifiedSyncService


async def sync_unified_data(request: web.Request) -> web.Response:
    """
    Sync users, subscriptions and payments from an external product.

    Returns:
        {"success": true, "action": ..., "data": {user?, subscription?,
        payment?, commissions?}}
    """
    body = await parse_body(request, SyncRequest)
    config = await request_config(request)

    async with request.app[SESSION_MAKER]() as session:
        outcome = await UnifiedSyncService(session, config).sync(body)

    return web.json_response(
        {
            "success": True,
            "action": outcome.action.value,
            "data": serialize_outcome(outcome),
        }
    )


def serialize_outcome(outcome: SyncOutcome) -> dict:
    """JSON-safe view of the records touched by a sync."""
    data: dict = {}
    if outcome.user is not None:
        data["user"] = UnifiedUserResponse.model_validate(
            outcome.user
        ).model_dump(mode="json")
    if outcome.subscription is not None:
        data["subscription"] = UnifiedUserResponse.model_validate(
            outcome.subscription
        ).model_dump(mode="json")
    if outcome.payment is not None:
        data["payment"] = UnifiedPaymentResponse.model_validate(
            outcome.payment
        ).model_dump(mode="json")
    if outcome.commissions is not None:
        data["commissions"] = outcome.commissions.model_dump(mode="json")
    return data

"""
API Initialization - Routes Module.

Registers all HTTP routes.
"""

from aiohttp import web

from api.handlers.commissions import (
    process_commission_status,
    reprocess_commissions,
)
from api.handlers.health import health_handler
from api.handlers.sync import sync_unified_data


def register_routes(app: web.Application) -> None:
    """
    Register all routes.

    Args:
        app: Application instance
    """
    app.router.add_get("/health", health_handler)
    app.router.add_post("/sync-unified-data", sync_unified_data)
    app.router.add_post("/reprocess-commissions", reprocess_commissions)
    app.router.add_post("/process-commission-status", process_commission_status)

"""
Health check handler.
"""

from aiohttp import web

from app.utils.datetime_utils import utc_now


async def health_handler(request: web.Request) -> web.Response:
    """Liveness probe for the API process."""
    return web.json_response(
        {
            "status": "alive",
            "alive": True,
            "timestamp": utc_now().isoformat(),
        }
    )

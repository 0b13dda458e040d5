"""
Bearer token authentication middleware.

Active only when SERVICE_API_KEY is configured. Health probes are
always public.
"""

import secrets

from aiohttp import web
from loguru import logger

from api.app_keys import SERVICE_API_KEY
from api.middlewares.error_handler import Handler, error_response


PUBLIC_PATHS = frozenset({"/health"})


@web.middleware
async def auth_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Reject requests without the configured bearer token."""
    api_key = request.app.get(SERVICE_API_KEY)
    if not api_key or request.path in PUBLIC_PATHS:
        return await handler(request)

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")

    if scheme.lower() != "bearer" or not secrets.compare_digest(
        token.strip().encode(), api_key.encode()
    ):
        logger.warning(
            "Unauthenticated request rejected",
            extra={"path": request.path, "remote": request.remote},
        )
        return error_response("Authentication required", 401)

    return await handler(request)

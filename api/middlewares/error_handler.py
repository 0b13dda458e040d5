"""
Global Error Handler Middleware.

Turns exceptions raised by handlers into the JSON error envelope
{"success": false, "error": ...}. Internal details are only logged.
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger

from app.utils.exceptions import CommissionEngineError, LookupUnavailable


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def error_response(message: str, status: int) -> web.Response:
    """Build the JSON error envelope."""
    return web.json_response({"success": False, "error": message}, status=status)


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """
    Map exceptions to HTTP statuses.

    - ValidationError -> 400
    - LookupUnavailable -> 503
    - Anything else -> 500
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except LookupUnavailable as e:
        logger.warning(
            f"Store unavailable: {e}",
            extra={"path": request.path, "method": request.method},
        )
        return error_response(str(e), e.http_status)
    except CommissionEngineError as e:
        logger.info(
            f"Request rejected: {e}",
            extra={"path": request.path, "status": e.http_status},
        )
        return error_response(str(e), e.http_status)
    except Exception as e:
        logger.opt(exception=e).error(
            f"Unhandled exception: {e.__class__.__name__}",
            extra={"path": request.path, "method": request.method},
        )
        return error_response("Internal server error", 500)

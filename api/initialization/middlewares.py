"""
API Initialization - Middlewares Module.

Registers all HTTP middlewares in the correct order.
"""

from aiohttp import web

from api.middlewares import auth_middleware, error_middleware


def register_middlewares(app: web.Application) -> None:
    """
    Register all middlewares.

    Middleware order is critical:
    1. Error handler (wraps everything, including auth)
    2. Auth

    Args:
        app: Application instance
    """
    app.middlewares.append(error_middleware)
    app.middlewares.append(auth_middleware)

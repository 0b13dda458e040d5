"""HTTP middlewares."""

from api.middlewares.auth import auth_middleware
from api.middlewares.error_handler import error_middleware


__all__ = ["auth_middleware", "error_middleware"]

"""
Base service class.

Provides common functionality for request-scoped services: session
handling, a context-bound logger and a transaction decorator.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.exceptions import (
    LookupUnavailable,
    ValidationError,
    error_message,
    is_retryable,
)


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Rollback current transaction."""
        await self.session.rollback()


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception. Transient store failures
    are re-raised as LookupUnavailable so callers can answer 503.

    Usage:
        @transaction
        async def sync_user(self, ...):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.monotonic()
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
        except ValidationError as e:
            await self.rollback()
            self.logger.warning(
                f"Rejected {func.__name__}: {e}",
                extra={"function": func.__name__},
            )
            raise
        except Exception as e:
            await self.rollback()
            self.logger.opt(exception=e).error(
                f"Transaction failed in {func.__name__}",
                extra={
                    "function": func.__name__,
                    "error": error_message(e),
                },
            )
            if is_retryable(e) and not isinstance(e, LookupUnavailable):
                raise LookupUnavailable(error_message(e)) from e
            raise

        self.logger.debug(
            f"Completed {func.__name__}",
            extra={
                "function": func.__name__,
                "duration_seconds": round(time.monotonic() - start_time, 3),
            },
        )
        return result

    return wrapper

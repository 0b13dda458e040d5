"""
Database decorators for store-call timeouts and error classification.

Provides decorators that bound store lookups in time and turn transient
store failures into LookupUnavailable.
"""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

from loguru import logger

from app.utils.exceptions import LookupUnavailable, error_message, is_retryable


T = TypeVar("T")


def lookup_guard(
    func: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, T]]:
    """
    Decorator for read-only store lookups on service methods.

    Usage:
        class HierarchyResolver:
            timeout = 10.0

            @lookup_guard
            async def resolve(self, descendant_id: str):
                ...

    The decorator will:
    1. Run the wrapped coroutine under asyncio.wait_for(self.timeout)
    2. Convert timeouts and connection-level failures to LookupUnavailable
    3. Re-raise every other exception unchanged

    Args:
        func: Async method of an object exposing a `timeout` attribute

    Returns:
        Wrapped method
    """
    @wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.wait_for(
                func(self, *args, **kwargs), timeout=self.timeout
            )
        except LookupUnavailable:
            raise
        except Exception as e:
            if not is_retryable(e):
                raise
            logger.warning(
                f"Store lookup {func.__qualname__} unavailable: {error_message(e)}"
            )
            raise LookupUnavailable(
                f"{func.__name__} unavailable: {error_message(e)}"
            ) from e

    return wrapper

"""
Dramatiq broker configuration.

Redis-based message broker for the commission actors.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import CurrentMessage, Retries, ShutdownNotifications
from loguru import logger

from app.config.settings import settings
from app.utils.exceptions import is_retryable


COMMISSION_QUEUE = "commissions"
MAX_TASK_RETRIES = 3


def should_retry(retries_so_far: int, exception: Exception) -> bool:
    """
    Retry policy for commission actors.

    Only transient store failures are retried; anything else would fail
    the same way again.
    """
    return retries_so_far < MAX_TASK_RETRIES and is_retryable(exception)


def create_broker() -> RedisBroker:
    """Create the Redis broker with shutdown and retry middleware."""
    redis_broker = RedisBroker(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password or None,
        db=settings.redis_db,
    )

    # ShutdownNotifications: lets long sweeps stop between payments
    # Retries: exponential backoff, transient failures only
    redis_broker.add_middleware(ShutdownNotifications())
    redis_broker.add_middleware(CurrentMessage())
    redis_broker.add_middleware(
        Retries(
            min_backoff=1000,  # 1 second
            max_backoff=60000,  # 1 minute
            retry_when=should_retry,
        )
    )
    return redis_broker


broker = create_broker()
dramatiq.set_broker(broker)

logger.info(
    f"Dramatiq broker initialized: "
    f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db} "
    f"(queue={COMMISSION_QUEUE})"
)

"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError


class CommissionEngineError(Exception):
    """Base class for commission engine errors."""

    http_status: int = 500


class ValidationError(CommissionEngineError):
    """Raised when a request is missing or has malformed fields."""

    http_status = 400


class LookupUnavailable(CommissionEngineError):
    """
    Raised when the hierarchy or rate store cannot be reached.

    Retryable: callers back off or leave the work to reconciliation.
    Never to be read as "no affiliate" or "no rate".
    """

    http_status = 503


class DuplicateSkipped(CommissionEngineError):
    """
    An insert hit the commission idempotency key.

    Not a failure: the entry already exists and is counted as such. The
    ledger writer logs it and moves on to the next level.
    """

    def __init__(self, payment_id: int, affiliate_id: str, level: int) -> None:
        self.payment_id = payment_id
        self.affiliate_id = affiliate_id
        self.level = level
        super().__init__(
            f"Commission already recorded for payment {payment_id}, "
            f"affiliate {affiliate_id}, level {level}"
        )


class PartialFailure(CommissionEngineError):
    """One item of a batch failed; the batch itself carries on."""

    def __init__(self, item_id: int | str, message: str) -> None:
        self.item_id = item_id
        self.message = message
        super().__init__(f"{item_id}: {message}")


# Exception categories based on handling strategy

# Transient store failures - safe to retry
RETRYABLE = (
    LookupUnavailable,
    OperationalError,  # Connection refused, server gone, lock timeout
    InterfaceError,    # Connection closed underneath the driver
    TimeoutError,      # Store call exceeded its timeout
    ConnectionError,
)


def is_retryable(exc: BaseException) -> bool:
    """
    Check if exception is a transient store failure.

    Args:
        exc: Exception to check

    Returns:
        True if retrying later can succeed
    """
    if isinstance(exc, RETRYABLE):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def error_message(exc: BaseException) -> str:
    """
    Human-readable message persisted into last_error / batch reports.

    Args:
        exc: Exception to describe

    Returns:
        Message text, falling back to the exception type name
    """
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        message = str(exc.orig)
    else:
        message = str(exc)
    return message or type(exc).__name__

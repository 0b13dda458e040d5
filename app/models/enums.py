"""
Closed value sets used by the commission engine.

Raw strings coming from intake or the store are resolved into these
members at the boundary; business logic only sees members.
"""

from enum import Enum


class CommissionStatus(str, Enum):
    """Commission lifecycle: pending -> available -> paid (or rejected)."""

    PENDING = "pending"
    AVAILABLE = "available"
    PAID = "paid"
    REJECTED = "rejected"


class CommissionType(str, Enum):
    """Commission type derived from the invoice billing reason."""

    FIRST_SALE = "primeira_venda"
    RENEWAL = "renovacao"
    ONE_TIME = "venda_avulsa"


class PlanType(str, Enum):
    """Affiliate subscription tier used to pick the rate row."""

    FREE = "FREE"
    PRO = "PRO"


class BillingReason:
    """Billing reasons reported by the payment provider."""

    SUBSCRIPTION_CREATE = "subscription_create"
    SUBSCRIPTION_CYCLE = "subscription_cycle"
    SUBSCRIPTION_UPDATE = "subscription_update"
    ONE_TIME_PURCHASE = "one_time_purchase"


class SyncAction(str, Enum):
    """Payment intake actions."""

    SYNC_USER = "sync_user"
    SYNC_PAYMENT = "sync_payment"
    SYNC_BOTH = "sync_both"
    SYNC_SUBSCRIPTION = "sync_subscription"


class ReprocessStatus(str, Enum):
    """Per-payment outcome of a reconciliation run."""

    ALREADY_PROCESSED = "already_processed"
    COMMISSIONS_FOUND = "commissions_found"
    REPROCESSED = "reprocessed"
    ERROR = "error"


class MaturationStatus(str, Enum):
    """Per-affiliate outcome of a maturation run."""

    PROCESSED = "processed"
    WAITING_WITHDRAWAL_DAY = "waiting_withdrawal_day"
    BELOW_MINIMUM = "below_minimum"
    ERROR = "error"

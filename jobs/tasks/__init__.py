"""Dramatiq actors for the commission engine."""

from jobs.tasks.commission_maturation import process_commission_status
from jobs.tasks.commission_reconciliation import reprocess_pending_commissions


__all__ = [
    "process_commission_status",
    "reprocess_pending_commissions",
]

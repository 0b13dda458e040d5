"""
Dramatiq worker entry point.

Run with: dramatiq jobs.worker
"""

from app.config.logging import setup_logging


setup_logging("worker")

from jobs.broker import broker  # noqa: E402, F401
from jobs.tasks import (  # noqa: E402, F401
    process_commission_status,
    reprocess_pending_commissions,
)

"""
Services.

Business logic layer.
"""

from app.services.base_service import BaseService, transaction
from app.services.commission import (
    CommissionLedgerWriter,
    CommissionReconciliationService,
    PayoutMaturationService,
)
from app.services.unified_sync_service import SyncOutcome, UnifiedSyncService


__all__ = [
    # Base Infrastructure
    "BaseService",
    "transaction",
    # Commission engine
    "CommissionLedgerWriter",
    "CommissionReconciliationService",
    "PayoutMaturationService",
    # Intake
    "SyncOutcome",
    "UnifiedSyncService",
]

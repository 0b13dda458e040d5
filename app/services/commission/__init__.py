"""
Commission services package.

Contains modular services for commission processing:
- config: Commission config snapshot loaded from app_settings
- calculator: Amount rounding, commission type and notes
- hierarchy_resolver: Ancestor affiliates of a paying user
- rate_table: Plan classification and per-level rates
- ledger_writer: Writes commission rows for one payment
- reconciliation: Repairs and retries unprocessed payments
- maturation: Promotes pending commissions to available
"""

from app.services.commission.calculator import (
    calculate_commission_amount,
    commission_type_for,
)
from app.services.commission.config import (
    CommissionConfig,
    load_commission_config,
    parse_check_schedule,
)
from app.services.commission.hierarchy_resolver import (
    AffiliateEdge,
    HierarchyResolver,
)
from app.services.commission.ledger_writer import (
    CommissionLedgerWriter,
    LedgerResult,
)
from app.services.commission.maturation import (
    MaturationReport,
    PayoutMaturationService,
)
from app.services.commission.rate_table import CommissionRateTable
from app.services.commission.reconciliation import (
    CommissionReconciliationService,
    ReconciliationReport,
    ReprocessResult,
)


__all__ = [
    # Configuration
    "CommissionConfig",
    "load_commission_config",
    "parse_check_schedule",
    # Lookups
    "AffiliateEdge",
    "HierarchyResolver",
    "CommissionRateTable",
    # Ledger
    "CommissionLedgerWriter",
    "LedgerResult",
    "calculate_commission_amount",
    "commission_type_for",
    # Batch jobs
    "CommissionReconciliationService",
    "ReconciliationReport",
    "ReprocessResult",
    "PayoutMaturationService",
    "MaturationReport",
]

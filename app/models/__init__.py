"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.affiliate_profile import AffiliateProfile
from app.models.app_setting import AppSetting
from app.models.base import Base

# Ledger
from app.models.commission import Commission
from app.models.enums import (
    BillingReason,
    CommissionStatus,
    CommissionType,
    MaturationStatus,
    PlanType,
    ReprocessStatus,
    SyncAction,
)

# Read-only inputs
from app.models.plan import Plan, Subscription
from app.models.product_commission_level import ProductCommissionLevel
from app.models.sub_affiliate import SubAffiliate

# Intake
from app.models.unified_payment import UnifiedPayment
from app.models.unified_user import UnifiedUser


__all__ = [
    "AffiliateProfile",
    "AppSetting",
    "Base",
    "BillingReason",
    "Commission",
    "CommissionStatus",
    "CommissionType",
    "MaturationStatus",
    "Plan",
    "PlanType",
    "ProductCommissionLevel",
    "ReprocessStatus",
    "SubAffiliate",
    "Subscription",
    "SyncAction",
    "UnifiedPayment",
    "UnifiedUser",
]

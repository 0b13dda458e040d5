"""
Business logic constants for the commission engine.

Central location for business rules and constants used across the application.
This module can be imported by both app.services and api handlers without circular dependencies.
"""

from decimal import Decimal


# Multi-level affiliate program: commissions are paid up to 3 levels up
REFERRAL_DEPTH = 3

# Payout maturation defaults (overridable through app_settings)
DEFAULT_HOLDING_PERIOD_DAYS = 7
DEFAULT_MINIMUM_WITHDRAWAL = Decimal("50.00")

# "hourly" or "HH:MM" (daily at that time, UTC)
DEFAULT_CHECK_SCHEDULE = "hourly"

# Reconciliation sweep size (newest first)
RECONCILIATION_BATCH_SIZE = 100

# app_settings keys
SETTING_DAYS_TO_AVAILABLE = "commission_days_to_available"
SETTING_MIN_WITHDRAWAL = "commission_min_withdrawal"
SETTING_CHECK_SCHEDULE = "commission_check_schedule"

# Withdrawal days are business days: 1=Monday ... 5=Friday
MIN_WITHDRAWAL_DAY = 1
MAX_WITHDRAWAL_DAY = 5
DEFAULT_WITHDRAWAL_DAY = 1

# Subscription statuses that make an affiliate's plan count
ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")

# Intake defaults
DEFAULT_CURRENCY = "brl"
DEFAULT_PAYMENT_STATUS = "paid"
DEFAULT_ENVIRONMENT = "production"

# Minor units per currency (ISO 4217); anything not listed uses 2
CURRENCY_MINOR_UNITS = {
    "bif": 0,
    "clp": 0,
    "djf": 0,
    "gnf": 0,
    "jpy": 0,
    "kmf": 0,
    "krw": 0,
    "mga": 0,
    "pyg": 0,
    "rwf": 0,
    "ugx": 0,
    "vnd": 0,
    "vuv": 0,
    "xaf": 0,
    "xof": 0,
    "xpf": 0,
    "bhd": 3,
    "jod": 3,
    "kwd": 3,
    "omr": 3,
    "tnd": 3,
}
DEFAULT_MINOR_UNITS = 2
